from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminRole

from .audit import LedgerAuditService
from .services import LedgerService


class LedgerReconcileAPIView(APIView):
    """
    GET reports cached aggregates that disagree with their live records.
    POST rewrites them from the records.
    """

    permission_classes = [IsAdminRole]

    def get(self, request):
        drifts = LedgerService.reconcile(apply=False)
        return Response(
            {"applied": False, "drift_count": len(drifts), "drifts": [drift.as_dict() for drift in drifts]},
            status=status.HTTP_200_OK,
        )

    def post(self, request):
        drifts = LedgerService.reconcile(apply=True)
        LedgerAuditService.log_reconciled(request, drifts, applied=True)
        return Response(
            {"applied": True, "drift_count": len(drifts), "drifts": [drift.as_dict() for drift in drifts]},
            status=status.HTTP_200_OK,
        )
