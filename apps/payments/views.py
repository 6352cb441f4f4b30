from copy import copy

from django.db import transaction
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminOrReadOnly
from apps.ledger.services import LedgerService
from common.serializers import RecordFilterQuerySerializer, apply_date_range

from .audit import PaymentAuditService
from .models import Payment
from .policies import PaymentPolicy
from .serializers import PaymentSerializer
from .services import create_payment


def _payment_not_found():
    return Response({"detail": "Payment not found."}, status=status.HTTP_404_NOT_FOUND)


class PaymentListCreateAPIView(APIView):
    permission_classes = [IsAdminOrReadOnly]

    def get(self, request):
        query = RecordFilterQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        filters = query.validated_data

        qs = PaymentPolicy.visible_payments(request.user)
        if filters.get("project_id"):
            qs = qs.filter(project_id=filters["project_id"])
        if filters.get("project_owner_id"):
            qs = qs.filter(project_owner_id=filters["project_owner_id"])
        qs = apply_date_range(qs, filters)
        return Response(PaymentSerializer(qs, many=True).data)

    def post(self, request):
        serializer = PaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payment = create_payment(**serializer.validated_data)
        PaymentAuditService.log_created(request, payment)
        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)


class PaymentDetailAPIView(APIView):
    permission_classes = [IsAdminOrReadOnly]

    def get(self, request, payment_id: int):
        payment = PaymentPolicy.visible_payments(request.user).filter(id=payment_id).first()
        if not payment:
            return _payment_not_found()
        return Response(PaymentSerializer(payment).data)

    def put(self, request, payment_id: int):
        return self._update(request, payment_id, partial=False)

    def patch(self, request, payment_id: int):
        return self._update(request, payment_id, partial=True)

    def _update(self, request, payment_id: int, *, partial: bool):
        with transaction.atomic():
            payment = Payment.objects.select_for_update().filter(id=payment_id).first()
            if not payment:
                return _payment_not_found()
            serializer = PaymentSerializer(payment, data=request.data, partial=partial)
            serializer.is_valid(raise_exception=True)
            previous = copy(payment)
            payment = serializer.save()
            LedgerService.post_payment_update(previous, payment)
        PaymentAuditService.log_updated(request, payment, sorted(serializer.validated_data))
        return Response(PaymentSerializer(payment).data)

    def delete(self, request, payment_id: int):
        with transaction.atomic():
            payment = Payment.objects.select_for_update().filter(id=payment_id).first()
            if not payment:
                return _payment_not_found()
            PaymentAuditService.log_deleted(request, payment)
            payment.delete()
            LedgerService.post_payment_delete(payment)
        return Response({"message": "Payment removed"}, status=status.HTTP_200_OK)
