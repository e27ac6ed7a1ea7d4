"""
HTTP server.

Thin aiohttp layer: reads the actor identity header and request
parameters, calls InvestmentService with a per-request session and maps
the envelope to a status code.
"""

import asyncio
import json
from collections.abc import Awaitable, Callable
from typing import Any

from aiohttp import web
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.api.responses import actor_id_from_request, envelope_response
from app.services.base_service import ServiceResult
from app.services.investment.service import InvestmentService
from app.utils.exceptions import ValidationError


SESSION_FACTORY_KEY = web.AppKey("session_factory", async_sessionmaker)

ServiceCall = Callable[[InvestmentService, int | None], Awaitable[ServiceResult]]


async def _run(request: web.Request, call: ServiceCall) -> web.Response:
    """Open a session, run one service call and render its envelope."""
    session_factory = request.app[SESSION_FACTORY_KEY]
    actor_id = actor_id_from_request(request)

    session: AsyncSession
    async with session_factory() as session:
        service = InvestmentService(session)
        result = await call(service, actor_id)

    return envelope_response(result)


async def _json_body(request: web.Request) -> dict[str, Any]:
    """Parse a JSON object body (empty body -> {})."""
    if not request.can_read_body:
        return {}
    try:
        body = await request.json()
    except json.JSONDecodeError:
        raise ValidationError("Request body must be JSON") from None
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def _bad_request(error: ValidationError) -> web.Response:
    return envelope_response(ServiceResult.fail(error))


def _condition_ids_from_query(request: web.Request) -> list[str] | None:
    raw = request.query.get("condition_ids")
    if not raw:
        return None
    return [part for part in raw.split(",") if part.strip()]


async def health_handler(request: web.Request) -> web.Response:
    """Liveness endpoint."""
    return web.json_response({"status": "alive", "alive": True})


async def resolve_access_handler(request: web.Request) -> web.Response:
    """GET /access/{owner_id}"""
    owner_id = request.match_info["owner_id"]
    return await _run(request, lambda s, actor: s.resolve_access(actor, owner_id))


async def resolve_rate_handler(request: web.Request) -> web.Response:
    """GET /rates?tier=&commitment_period=&liquidity_class=&condition_ids=1,2"""
    query = request.query
    return await _run(
        request,
        lambda s, actor: s.resolve_rate(
            actor,
            query.get("tier"),
            query.get("commitment_period"),
            query.get("liquidity_class"),
            _condition_ids_from_query(request),
        ),
    )


async def submit_investment_handler(request: web.Request) -> web.Response:
    """POST /investments"""
    try:
        body = await _json_body(request)
    except ValidationError as e:
        return _bad_request(e)

    return await _run(
        request,
        lambda s, actor: s.submit_investment(
            actor,
            owner_id=body.get("owner_id", actor),
            amount=body.get("amount"),
            commitment_period=body.get("commitment_period"),
            liquidity_class=body.get("liquidity_class"),
            condition_ids=body.get("condition_ids"),
        ),
    )


async def approve_investment_handler(request: web.Request) -> web.Response:
    """POST /investments/{investment_id}/approve"""
    investment_id = request.match_info["investment_id"]
    try:
        body = await _json_body(request)
    except ValidationError as e:
        return _bad_request(e)

    return await _run(
        request,
        lambda s, actor: s.approve_investment(
            actor,
            investment_id,
            receipt_ref=body.get("receipt_ref"),
            payment_date=body.get("payment_date"),
            expected_version=body.get("version"),
        ),
    )


async def request_withdrawal_handler(request: web.Request) -> web.Response:
    """POST /investments/{investment_id}/withdrawals"""
    investment_id = request.match_info["investment_id"]
    try:
        body = await _json_body(request)
    except ValidationError as e:
        return _bad_request(e)

    return await _run(
        request,
        lambda s, actor: s.request_withdrawal(
            actor,
            investment_id,
            withdrawal_type=body.get("withdrawal_type"),
            amount=body.get("amount"),
        ),
    )


async def withdrawal_requests_handler(request: web.Request) -> web.Response:
    """GET /investments/{investment_id}/withdrawals"""
    investment_id = request.match_info["investment_id"]
    return await _run(
        request, lambda s, actor: s.withdrawal_requests(actor, investment_id)
    )


async def process_withdrawal_handler(request: web.Request) -> web.Response:
    """POST /withdrawals/{request_id}/process"""
    request_id = request.match_info["request_id"]
    try:
        body = await _json_body(request)
    except ValidationError as e:
        return _bad_request(e)

    return await _run(
        request,
        lambda s, actor: s.process_withdrawal(
            actor,
            request_id,
            action=body.get("action"),
            reason=body.get("reason"),
            expected_version=body.get("version"),
        ),
    )


async def withdraw_investment_handler(request: web.Request) -> web.Response:
    """POST /investments/{investment_id}/withdraw"""
    investment_id = request.match_info["investment_id"]
    try:
        body = await _json_body(request)
    except ValidationError as e:
        return _bad_request(e)

    return await _run(
        request,
        lambda s, actor: s.withdraw_investment(
            actor, investment_id, expected_version=body.get("version")
        ),
    )


async def renew_investment_handler(request: web.Request) -> web.Response:
    """POST /investments/{investment_id}/renew"""
    investment_id = request.match_info["investment_id"]
    try:
        body = await _json_body(request)
    except ValidationError as e:
        return _bad_request(e)

    return await _run(
        request,
        lambda s, actor: s.renew_investment(
            actor,
            investment_id,
            action=body.get("action"),
            params=body.get("params") or {},
            expected_version=body.get("version"),
        ),
    )


async def accrued_dividends_handler(request: web.Request) -> web.Response:
    """GET /investments/{investment_id}/dividends?as_of="""
    investment_id = request.match_info["investment_id"]
    as_of = request.query.get("as_of")
    return await _run(
        request, lambda s, actor: s.accrued_dividends(actor, investment_id, as_of)
    )


async def period_dividends_handler(request: web.Request) -> web.Response:
    """GET /investments/{investment_id}/period-dividends?as_of="""
    investment_id = request.match_info["investment_id"]
    as_of = request.query.get("as_of")
    return await _run(
        request, lambda s, actor: s.period_dividends(actor, investment_id, as_of)
    )


async def renewal_history_handler(request: web.Request) -> web.Response:
    """GET /investments/{investment_id}/renewals"""
    investment_id = request.match_info["investment_id"]
    return await _run(
        request, lambda s, actor: s.renewal_history(actor, investment_id)
    )


async def renewal_window_handler(request: web.Request) -> web.Response:
    """GET /checks/renewal-window?now=&owner_id="""
    now = request.query.get("now")
    owner_id = request.query.get("owner_id")
    return await _run(
        request, lambda s, actor: s.check_renewal_window(actor, now, owner_id)
    )


async def accrual_gate_handler(request: web.Request) -> web.Response:
    """GET /checks/accrual-gate?now="""
    now = request.query.get("now")
    return await _run(request, lambda s, actor: s.check_accrual_gate_crossed(actor, now))


async def payout_day_handler(request: web.Request) -> web.Response:
    """GET /checks/payout-day?now="""
    now = request.query.get("now")
    return await _run(request, lambda s, actor: s.check_fixed_payout_day(actor, now))


def create_app(session_factory: async_sessionmaker | None = None) -> web.Application:
    """
    Build the aiohttp application.

    Args:
        session_factory: Session maker (defaults to app.config.database)

    Returns:
        Configured application
    """
    if session_factory is None:
        from app.config.database import async_session_maker

        session_factory = async_session_maker

    app = web.Application()
    app[SESSION_FACTORY_KEY] = session_factory

    app.router.add_get("/health", health_handler)
    app.router.add_get("/access/{owner_id}", resolve_access_handler)
    app.router.add_get("/rates", resolve_rate_handler)
    app.router.add_post("/investments", submit_investment_handler)
    app.router.add_post("/investments/{investment_id}/approve", approve_investment_handler)
    app.router.add_post("/investments/{investment_id}/withdraw", withdraw_investment_handler)
    app.router.add_post(
        "/investments/{investment_id}/withdrawals", request_withdrawal_handler
    )
    app.router.add_get(
        "/investments/{investment_id}/withdrawals", withdrawal_requests_handler
    )
    app.router.add_post("/withdrawals/{request_id}/process", process_withdrawal_handler)
    app.router.add_post("/investments/{investment_id}/renew", renew_investment_handler)
    app.router.add_get("/investments/{investment_id}/dividends", accrued_dividends_handler)
    app.router.add_get(
        "/investments/{investment_id}/period-dividends", period_dividends_handler
    )
    app.router.add_get("/investments/{investment_id}/renewals", renewal_history_handler)
    app.router.add_get("/checks/renewal-window", renewal_window_handler)
    app.router.add_get("/checks/accrual-gate", accrual_gate_handler)
    app.router.add_get("/checks/payout-day", payout_day_handler)

    return app


async def start_api_server(
    host: str,
    port: int,
    session_factory: async_sessionmaker | None = None,
) -> web.AppRunner:
    """
    Start the API server.

    Args:
        host: Host to bind to
        port: Port to bind to
        session_factory: Optional session maker

    Returns:
        AppRunner for cleanup
    """
    runner = web.AppRunner(create_app(session_factory))
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()

    logger.info(f"API server started on {host}:{port}")
    return runner


async def stop_api_server(runner: web.AppRunner, timeout: int = 5) -> None:
    """
    Stop the API server gracefully.

    Args:
        runner: AppRunner to cleanup
        timeout: Maximum time to wait for cleanup in seconds
    """
    logger.info("Stopping API server...")
    try:
        await asyncio.wait_for(runner.cleanup(), timeout=timeout)
        logger.info("API server stopped")
    except TimeoutError:
        logger.warning(f"API server cleanup timed out after {timeout}s")
