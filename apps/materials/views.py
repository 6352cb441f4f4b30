from copy import copy

from django.db import transaction
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminOrReadOnly
from apps.ledger.services import LedgerService

from .audit import MaterialAuditService
from .models import Material
from .policies import MaterialPolicy
from .serializers import MaterialListQuerySerializer, MaterialSerializer


def _material_not_found():
    return Response({"detail": "Material not found."}, status=status.HTTP_404_NOT_FOUND)


class MaterialListCreateAPIView(APIView):
    permission_classes = [IsAdminOrReadOnly]

    def get(self, request):
        query = MaterialListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        qs = MaterialPolicy.visible_materials(request.user)
        if query.validated_data.get("project_id"):
            qs = qs.filter(project_id=query.validated_data["project_id"])
        if query.validated_data.get("category"):
            qs = qs.filter(category__iexact=query.validated_data["category"])
        return Response(MaterialSerializer(qs, many=True).data)

    def post(self, request):
        serializer = MaterialSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            material = serializer.save()
            LedgerService.post_material_create(material)
        MaterialAuditService.log_created(request, material)
        return Response(MaterialSerializer(material).data, status=status.HTTP_201_CREATED)


class MaterialDetailAPIView(APIView):
    permission_classes = [IsAdminOrReadOnly]

    def get(self, request, material_id: int):
        material = MaterialPolicy.visible_materials(request.user).filter(id=material_id).first()
        if not material:
            return _material_not_found()
        return Response(MaterialSerializer(material).data)

    def put(self, request, material_id: int):
        return self._update(request, material_id, partial=False)

    def patch(self, request, material_id: int):
        return self._update(request, material_id, partial=True)

    def _update(self, request, material_id: int, *, partial: bool):
        with transaction.atomic():
            material = Material.objects.select_for_update().filter(id=material_id).first()
            if not material:
                return _material_not_found()
            serializer = MaterialSerializer(material, data=request.data, partial=partial)
            serializer.is_valid(raise_exception=True)
            previous = copy(material)
            material = serializer.save()
            LedgerService.post_material_update(previous, material)
        MaterialAuditService.log_updated(request, material, sorted(serializer.validated_data))
        return Response(MaterialSerializer(material).data)

    def delete(self, request, material_id: int):
        with transaction.atomic():
            material = Material.objects.select_for_update().filter(id=material_id).first()
            if not material:
                return _material_not_found()
            MaterialAuditService.log_deleted(request, material)
            material.delete()
            LedgerService.post_material_delete(material)
        return Response({"message": "Material removed"}, status=status.HTTP_200_OK)
