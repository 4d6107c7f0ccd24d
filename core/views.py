import time

from django.conf import settings
from django.db import connection
from django.db.utils import OperationalError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView


class HealthCheckView(APIView):
    """
    Public uptime probe.

    Reports database reachability and whether the backend gives team
    arbitration row-level locks (on SQLite writes are serialized per database).
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request, *args, **kwargs):
        start = time.monotonic()

        try:
            connection.ensure_connection()
            db_ok = True
        except OperationalError:
            db_ok = False

        team_config = getattr(settings, "TEAM_FORMATION", {})

        return Response(
            {
                "status": "ok" if db_ok else "degraded",
                "db": db_ok,
                "db_vendor": connection.vendor,
                "row_locks": connection.features.has_select_for_update,
                "retry_limit": team_config.get("TRANSIENT_RETRY_LIMIT"),
                "env": getattr(settings, "ENV", "unknown"),
                "latency_ms": int((time.monotonic() - start) * 1000),
            }
        )
