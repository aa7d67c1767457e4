from django.db import DatabaseError, connection
from django.http import HttpResponse

from core.elections_services import StorageTransactionUnsupportedError, ensure_atomic_commit_supported


def healthz(request):
    return HttpResponse("ok", content_type="text/plain")


def readyz(request):
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except DatabaseError:
        return HttpResponse("db unavailable", status=503, content_type="text/plain")

    try:
        ensure_atomic_commit_supported()
    except StorageTransactionUnsupportedError:
        return HttpResponse("db lacks transactions", status=503, content_type="text/plain")

    return HttpResponse("ok", content_type="text/plain")
