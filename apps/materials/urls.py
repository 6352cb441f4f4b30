from django.urls import path

from .views import MaterialDetailAPIView, MaterialListCreateAPIView


urlpatterns = [
    path("", MaterialListCreateAPIView.as_view(), name="material-list"),
    path("<int:material_id>/", MaterialDetailAPIView.as_view(), name="material-detail"),
]
