"""
Envelope to HTTP response mapping.
"""

from aiohttp import web

from app.services.base_service import ServiceResult
from app.utils.exceptions import status_for_error_code


ACTOR_HEADER = "X-Actor-Id"


def status_for_result(result: ServiceResult) -> int:
    """
    HTTP status of a service result.

    200 on success; failures map through their error code
    (400, 401, 403, 404, 409, 500).
    """
    if result.success:
        return 200
    return status_for_error_code(result.error_code)


def envelope_response(result: ServiceResult) -> web.Response:
    """Render a ServiceResult as a JSON response."""
    return web.json_response(result.to_dict(), status=status_for_result(result))


def actor_id_from_request(request: web.Request) -> int | None:
    """
    Read the verified actor ID set by the upstream auth layer.

    Returns:
        Actor ID, or None when the header is missing or malformed
    """
    raw = request.headers.get(ACTOR_HEADER, "").strip()
    if not raw.isdigit():
        return None
    actor_id = int(raw)
    return actor_id if actor_id > 0 else None
