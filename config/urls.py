from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from .health import health_check

admin.site.site_header = "Contractor Ledger Administration"
admin.site.site_title = "Contractor Ledger"
admin.site.index_title = "Records"

urlpatterns = [
    path("health/", health_check, name="health"),
    path("admin/", admin.site.urls),

    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),

    path("api/v1/auth/", include("accounts.urls")),
    path("api/v1/workers/", include("apps.workers.urls")),
    path("api/v1/", include("apps.projects.urls")),
    path("api/v1/materials/", include("apps.materials.urls")),
    path("api/v1/attendance/", include("apps.attendance.urls")),
    path("api/v1/salaries/", include("apps.salaries.urls")),
    path("api/v1/payments/", include("apps.payments.urls")),
    path("api/v1/ledger/", include("apps.ledger.urls")),
    path("api/v1/reports/", include("apps.reports.urls")),
]
