from datetime import timedelta

import pytest
from fastapi import HTTPException

from salonbook.core.auth import create_access_token, get_current_user, get_current_partner


@pytest.mark.asyncio
async def test_token_round_trip():
    token = create_access_token({"sub": "partner-1", "role": "partner", "email": "owner@example.com"})
    user = await get_current_user(token)
    assert user == {"_id": "partner-1", "role": "partner", "email": "owner@example.com"}


@pytest.mark.asyncio
async def test_missing_role_defaults_to_client():
    user = await get_current_user(create_access_token({"sub": "client-1"}))
    assert user["role"] == "client"


@pytest.mark.asyncio
@pytest.mark.parametrize("token", [
    "not-a-jwt",
    create_access_token({"sub": "client-1"}, expires_delta=timedelta(minutes=-5)),
    create_access_token({"role": "client"}),
    create_access_token({"sub": "client-1", "role": "admin"}),
])
async def test_rejected_tokens(token):
    with pytest.raises(HTTPException) as exc_info:
        await get_current_user(token)
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_partner_required():
    with pytest.raises(HTTPException) as exc_info:
        await get_current_partner({"_id": "client-1", "role": "client", "email": None})
    assert exc_info.value.status_code == 403
