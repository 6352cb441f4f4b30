from django.urls import path

from .views import PaymentDetailAPIView, PaymentListCreateAPIView


urlpatterns = [
    path("", PaymentListCreateAPIView.as_view(), name="payment-list"),
    path("<int:payment_id>/", PaymentDetailAPIView.as_view(), name="payment-detail"),
]
