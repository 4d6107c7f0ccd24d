import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger("teamforge.core")

# WWW-Authenticate and Retry-After must survive the re-wrap
PASSTHROUGH_HEADERS = ("WWW-Authenticate", "Retry-After")


def custom_exception_handler(exc, context):
    """
    Render every API error as

        {"success": false, "status_code": <int>, "errors": <details>}

    Single-message errors (team rules, auth, lookups) carry their stable
    `code` next to `detail`; field validation errors keep DRF's per-field shape.
    """
    response = drf_exception_handler(exc, context)

    if response is None:
        logger.exception("Unhandled API exception", exc_info=exc)
        return Response(
            {
                "success": False,
                "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
                "errors": {"detail": "Internal server error."},
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    errors = response.data
    if isinstance(errors, dict) and set(errors) == {"detail"}:
        errors = {
            "detail": errors["detail"],
            "code": getattr(errors["detail"], "code", None),
        }

    if response.status_code == status.HTTP_409_CONFLICT:
        view = context.get("view")
        logger.info(
            f"Conflict on {view.__class__.__name__ if view else 'unknown view'}: "
            f"{errors.get('code') if isinstance(errors, dict) else errors}"
        )

    headers = {key: response[key] for key in PASSTHROUGH_HEADERS if response.has_header(key)}

    return Response(
        {
            "success": False,
            "status_code": response.status_code,
            "errors": errors,
        },
        status=response.status_code,
        headers=headers,
    )
