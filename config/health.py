from django.db import connection
from django.http import JsonResponse


def health_check(request):
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        database = "ok"
    except Exception as exc:
        return JsonResponse({"status": "error", "database": str(exc)[:120]}, status=503)
    return JsonResponse({"status": "ok", "database": database})
