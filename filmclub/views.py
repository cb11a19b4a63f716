from django.conf import settings
from django.db import DatabaseError, connection
from django.http import JsonResponse


def health_view(request):
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        db_ok = True
    except DatabaseError:
        db_ok = False

    return JsonResponse(
        {
            "ok": db_ok,
            "database": "ok" if db_ok else "error",
            "catalog_configured": bool(getattr(settings, "TMDB_API_KEY", "")),
        },
        status=200 if db_ok else 503,
    )
