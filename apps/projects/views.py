from copy import copy

from django.db import transaction
from django.db.models import Q
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminOrReadOnly, IsAdminRole
from apps.ledger.services import LedgerService
from apps.payments.audit import PaymentAuditService
from apps.payments.serializers import PaymentSerializer
from apps.payments.services import create_payment

from .audit import ProjectAuditService
from .models import Project, ProjectOwner
from .policies import ProjectPolicy
from .serializers import (
    AssignedWorkerSerializer,
    AssignWorkersSerializer,
    OwnerProjectsQuerySerializer,
    ProcessPaymentSerializer,
    ProjectListQuerySerializer,
    ProjectOwnerOptionSerializer,
    ProjectOwnerSerializer,
    ProjectSerializer,
    ProjectSummarySerializer,
)
from .services import owner_projects_summary, project_finance_summary


def _owner_not_found():
    return Response({"detail": "Project owner not found."}, status=status.HTTP_404_NOT_FOUND)


def _project_not_found():
    return Response({"detail": "Project not found."}, status=status.HTTP_404_NOT_FOUND)


class ProjectOwnerListCreateAPIView(APIView):
    permission_classes = [IsAdminOrReadOnly]

    def get(self, request):
        search = (request.query_params.get("search") or "").strip()
        qs = ProjectPolicy.visible_owners(request.user)
        if search:
            qs = qs.filter(
                Q(name__icontains=search)
                | Q(email__icontains=search)
                | Q(company__icontains=search)
                | Q(phone__icontains=search)
            )
        return Response(ProjectOwnerSerializer(qs, many=True).data)

    def post(self, request):
        serializer = ProjectOwnerSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        owner = serializer.save()
        ProjectAuditService.log_owner_created(request, owner)
        return Response(ProjectOwnerSerializer(owner).data, status=status.HTTP_201_CREATED)


class ProjectOwnerOptionsAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        qs = ProjectPolicy.visible_owners(request.user).order_by("name")
        return Response(ProjectOwnerOptionSerializer(qs, many=True).data)


class ProjectOwnerDetailAPIView(APIView):
    permission_classes = [IsAdminOrReadOnly]

    def get(self, request, owner_id: int):
        owner = ProjectPolicy.visible_owners(request.user).filter(id=owner_id).first()
        if not owner:
            return _owner_not_found()
        return Response(ProjectOwnerSerializer(owner).data)

    def put(self, request, owner_id: int):
        return self._update(request, owner_id, partial=False)

    def patch(self, request, owner_id: int):
        return self._update(request, owner_id, partial=True)

    def _update(self, request, owner_id: int, *, partial: bool):
        with transaction.atomic():
            owner = ProjectOwner.objects.select_for_update().filter(id=owner_id).first()
            if not owner:
                return _owner_not_found()
            serializer = ProjectOwnerSerializer(owner, data=request.data, partial=partial)
            serializer.is_valid(raise_exception=True)
            owner = serializer.save()
        ProjectAuditService.log_owner_updated(request, owner, sorted(serializer.validated_data))
        return Response(ProjectOwnerSerializer(owner).data)

    def delete(self, request, owner_id: int):
        owner = ProjectOwner.objects.filter(id=owner_id).first()
        if not owner:
            return _owner_not_found()
        reason = ProjectPolicy.owner_delete_blocker(owner)
        if reason:
            ProjectAuditService.log_owner_delete_blocked(request, owner, reason)
            return Response({"detail": reason}, status=status.HTTP_400_BAD_REQUEST)
        ProjectAuditService.log_owner_deleted(request, owner)
        owner.delete()
        return Response({"message": "Project owner removed"}, status=status.HTTP_200_OK)


class ProjectOwnerProjectsAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, owner_id: int):
        owner = ProjectPolicy.visible_owners(request.user).filter(id=owner_id).first()
        if not owner:
            return _owner_not_found()
        query = OwnerProjectsQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        projects = owner.projects.prefetch_related("assigned_workers").order_by(query.validated_data["sort"], "id")
        payload = owner_projects_summary(owner, projects)
        payload["projects"] = ProjectSummarySerializer(projects, many=True).data
        return Response(payload)


class ProjectListCreateAPIView(APIView):
    permission_classes = [IsAdminOrReadOnly]

    def get(self, request):
        query = ProjectListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        filters = query.validated_data

        qs = ProjectPolicy.visible_projects(request.user).prefetch_related("assigned_workers")
        search = (filters.get("search") or "").strip()
        if search:
            qs = qs.filter(Q(name__icontains=search) | Q(description__icontains=search))
        if filters.get("status"):
            qs = qs.filter(status=filters["status"])
        if filters.get("owner_id"):
            qs = qs.filter(owner_id=filters["owner_id"])
        return Response(ProjectSerializer(qs, many=True).data)

    def post(self, request):
        serializer = ProjectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        project = serializer.save()
        ProjectAuditService.log_project_created(request, project)
        return Response(ProjectSerializer(project).data, status=status.HTTP_201_CREATED)


class ProjectDetailAPIView(APIView):
    permission_classes = [IsAdminOrReadOnly]

    def get(self, request, project_id: int):
        project = ProjectPolicy.visible_projects(request.user).filter(id=project_id).first()
        if not project:
            return _project_not_found()
        return Response(ProjectSerializer(project).data)

    def put(self, request, project_id: int):
        return self._update(request, project_id, partial=False)

    def patch(self, request, project_id: int):
        return self._update(request, project_id, partial=True)

    def _update(self, request, project_id: int, *, partial: bool):
        with transaction.atomic():
            project = Project.objects.select_for_update().filter(id=project_id).first()
            if not project:
                return _project_not_found()
            serializer = ProjectSerializer(project, data=request.data, partial=partial)
            serializer.is_valid(raise_exception=True)
            previous = copy(project)
            project = serializer.save()
            LedgerService.post_project_update(previous, project)
        ProjectAuditService.log_project_updated(request, project, sorted(serializer.validated_data))
        return Response(ProjectSerializer(project).data)

    def delete(self, request, project_id: int):
        project = Project.objects.filter(id=project_id).first()
        if not project:
            return _project_not_found()
        reason = ProjectPolicy.project_delete_blocker(project)
        if reason:
            ProjectAuditService.log_project_delete_blocked(request, project, reason)
            return Response({"detail": reason}, status=status.HTTP_400_BAD_REQUEST)
        ProjectAuditService.log_project_deleted(request, project)
        project.delete()
        return Response({"message": "Project removed"}, status=status.HTTP_200_OK)


class ProjectFinanceAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, project_id: int):
        project = ProjectPolicy.visible_projects(request.user).filter(id=project_id).first()
        if not project:
            return _project_not_found()
        return Response(project_finance_summary(project))


class ProjectPaymentAPIView(APIView):
    permission_classes = [IsAdminRole]

    def post(self, request, project_id: int):
        project = Project.objects.filter(id=project_id).first()
        if not project:
            return _project_not_found()
        serializer = ProcessPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payment = create_payment(project=project, project_owner_id=project.owner_id, **serializer.validated_data)
        PaymentAuditService.log_created(request, payment)
        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)


class ProjectWorkersAPIView(APIView):
    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAdminRole()]
        return [IsAuthenticated()]

    def get(self, request, project_id: int):
        project = ProjectPolicy.visible_projects(request.user).filter(id=project_id).first()
        if not project:
            return _project_not_found()
        return Response(AssignedWorkerSerializer(project.assigned_workers.order_by("name"), many=True).data)

    def post(self, request, project_id: int):
        project = Project.objects.filter(id=project_id).first()
        if not project:
            return _project_not_found()
        serializer = AssignWorkersSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        worker_ids = serializer.validated_data["worker_ids"]
        # Adds to the current assignment, existing workers stay.
        project.assigned_workers.add(*worker_ids)
        ProjectAuditService.log_workers_assigned(request, project, worker_ids)
        return Response(ProjectSerializer(project).data)
