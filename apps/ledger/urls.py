from django.urls import path

from .views import LedgerReconcileAPIView


urlpatterns = [
    path("reconcile/", LedgerReconcileAPIView.as_view(), name="ledger-reconcile"),
]
