from django.urls import path

from .views import SalaryDetailAPIView, SalaryListCreateAPIView


urlpatterns = [
    path("", SalaryListCreateAPIView.as_view(), name="salary-list"),
    path("<int:salary_id>/", SalaryDetailAPIView.as_view(), name="salary-detail"),
]
