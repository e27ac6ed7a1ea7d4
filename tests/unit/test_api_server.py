"""Tests for the HTTP layer (aiohttp test server, mocked session)."""

import pytest
import pytest_asyncio
from aiohttp import test_utils

from app.api.server import create_app


class _SessionFactory:
    """Session maker stand-in yielding the mocked session."""

    def __init__(self, session):
        self.session = session

    def __call__(self):
        return self

    async def __aenter__(self):
        return self.session

    async def __aexit__(self, exc_type, exc, tb):
        return False


@pytest_asyncio.fixture
async def client(mock_session, org, make_investment):
    make_investment(id=21)
    app = create_app(_SessionFactory(mock_session))
    async with test_utils.TestClient(test_utils.TestServer(app)) as test_client:
        yield test_client


def _as(actor_id):
    return {"X-Actor-Id": str(actor_id)}


class TestHttpMapping:
    """Envelope to status code mapping over HTTP."""

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status == 200
        assert (await response.json())["alive"] is True

    @pytest.mark.asyncio
    async def test_missing_identity(self, client):
        response = await client.get("/access/4")
        body = await response.json()

        assert response.status == 401
        assert body["success"] is False
        assert body["error_code"] == "UNAUTHENTICATED"

    @pytest.mark.asyncio
    async def test_access_granted(self, client):
        response = await client.get("/access/4", headers=_as(1))
        body = await response.json()

        assert response.status == 200
        assert body == {
            "success": True,
            "data": {"actor_id": 1, "owner_id": 4, "allowed": True},
        }

    @pytest.mark.asyncio
    async def test_rate_lookup(self, client):
        response = await client.get(
            "/rates",
            params={"tier": "investor", "commitment_period": "12", "liquidity_class": "monthly"},
            headers=_as(4),
        )

        assert response.status == 200
        assert (await response.json())["data"]["monthly_rate"] == "0.02"

    @pytest.mark.asyncio
    async def test_renew_validation_error(self, client):
        response = await client.post(
            "/investments/21/renew",
            json={"action": "renewWithNewRules", "params": {}},
            headers=_as(4),
        )

        assert response.status == 400

    @pytest.mark.asyncio
    async def test_malformed_body(self, client):
        response = await client.post(
            "/investments/21/renew",
            data="not json",
            headers={**_as(4), "Content-Type": "application/json"},
        )

        assert response.status == 400

    @pytest.mark.asyncio
    async def test_accrued_dividends(self, client):
        response = await client.get(
            "/investments/21/dividends", params={"as_of": "2024-04-01"}, headers=_as(4)
        )

        assert response.status == 200
        assert (await response.json())["data"]["accrued_dividends"] == "200.00000000"

    @pytest.mark.asyncio
    async def test_withdraw_by_investor_forbidden(self, client):
        response = await client.post("/investments/21/withdraw", headers=_as(4))
        assert response.status == 403

    @pytest.mark.asyncio
    async def test_withdraw_stale_version(self, client):
        response = await client.post(
            "/investments/21/withdraw", json={"version": 3}, headers=_as(2)
        )
        assert response.status == 409

    @pytest.mark.asyncio
    async def test_request_withdrawal(self, client):
        response = await client.post(
            "/investments/21/withdrawals",
            json={"withdrawal_type": "partial", "amount": "1500"},
            headers=_as(4),
        )

        assert response.status == 200
        data = (await response.json())["data"]
        assert data["status"] == "pending"
        assert data["amount"] == "1500"

    @pytest.mark.asyncio
    async def test_withdraw_without_request_conflicts(self, client):
        response = await client.post("/investments/21/withdraw", headers=_as(2))
        assert response.status == 409

    @pytest.mark.asyncio
    async def test_process_unknown_withdrawal(self, client):
        response = await client.post(
            "/withdrawals/404/process", json={"action": "approve"}, headers=_as(2)
        )
        assert response.status == 404

    @pytest.mark.asyncio
    async def test_unknown_investment(self, client):
        response = await client.get("/investments/999/dividends", headers=_as(4))
        assert response.status == 404
