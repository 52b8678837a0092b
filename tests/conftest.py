from datetime import date, timedelta

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from main import app
from salonbook.core.auth import create_access_token

PARTNER_ID = "partner-1"
OTHER_PARTNER_ID = "partner-2"
CLIENT_ID = "client-1"

def next_weekday(day_of_week: int) -> date:
    """First date after today falling on day_of_week (0 = Sunday)."""
    candidate = date.today() + timedelta(days=1)
    while candidate.isoweekday() % 7 != day_of_week:
        candidate += timedelta(days=1)
    return candidate

def auth_headers(user_id: str, role: str) -> dict:
    token = create_access_token({"sub": user_id, "role": role})
    return {"Authorization": f"Bearer {token}"}

@pytest_asyncio.fixture
async def api_client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

@pytest.fixture
def partner_headers():
    return auth_headers(PARTNER_ID, "partner")

@pytest.fixture
def other_partner_headers():
    return auth_headers(OTHER_PARTNER_ID, "partner")

@pytest.fixture
def client_headers():
    return auth_headers(CLIENT_ID, "client")
