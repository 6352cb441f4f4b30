from django.urls import path

from .views import (
    ProjectDetailAPIView,
    ProjectFinanceAPIView,
    ProjectListCreateAPIView,
    ProjectOwnerDetailAPIView,
    ProjectOwnerListCreateAPIView,
    ProjectOwnerOptionsAPIView,
    ProjectOwnerProjectsAPIView,
    ProjectPaymentAPIView,
    ProjectWorkersAPIView,
)


urlpatterns = [
    path("project-owners/", ProjectOwnerListCreateAPIView.as_view(), name="project-owner-list"),
    path("project-owners/options/", ProjectOwnerOptionsAPIView.as_view(), name="project-owner-options"),
    path("project-owners/<int:owner_id>/", ProjectOwnerDetailAPIView.as_view(), name="project-owner-detail"),
    path(
        "project-owners/<int:owner_id>/projects/",
        ProjectOwnerProjectsAPIView.as_view(),
        name="project-owner-projects",
    ),
    path("projects/", ProjectListCreateAPIView.as_view(), name="project-list"),
    path("projects/<int:project_id>/", ProjectDetailAPIView.as_view(), name="project-detail"),
    path("projects/<int:project_id>/finance/", ProjectFinanceAPIView.as_view(), name="project-finance"),
    path("projects/<int:project_id>/payments/", ProjectPaymentAPIView.as_view(), name="project-payments"),
    path("projects/<int:project_id>/workers/", ProjectWorkersAPIView.as_view(), name="project-workers"),
]
