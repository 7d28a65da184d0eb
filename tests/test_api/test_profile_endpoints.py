"""Tests for /api/agents/profile endpoints."""

import pytest

from tests.utils.helpers import auth_headers

AGENT = "agent-1"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_health(api_client):
    response = await api_client.get("/")

    assert response.status_code == 200
    assert response.json() == {"message": "Agent Service is running"}


@pytest.mark.integration
@pytest.mark.asyncio
async def test_me_requires_token(api_client):
    response = await api_client.get("/api/agents/profile/me")

    assert response.status_code == 401
    assert response.json() == {"message": "No token provided"}


@pytest.mark.integration
@pytest.mark.asyncio
async def test_me_rejects_bad_token(api_client):
    response = await api_client.get("/api/agents/profile/me", headers={"Authorization": "Bearer nope"})

    assert response.status_code == 401
    assert response.json() == {"message": "Invalid or expired token"}


@pytest.mark.integration
@pytest.mark.asyncio
async def test_me_with_auth_service_down(api_client, make_profile, fake_auth):
    """Test enrichment failure still gives 200 with user=null."""
    await make_profile(AGENT, agency_name="Acme Realty")
    fake_auth.down = True

    response = await api_client.get("/api/agents/profile/me", headers=auth_headers(AGENT))

    assert response.status_code == 200
    body = response.json()
    assert body["profile"]["agencyName"] == "Acme Realty"
    assert body["profile"]["user"] is None


@pytest.mark.integration
@pytest.mark.asyncio
async def test_me_not_found(api_client):
    response = await api_client.get("/api/agents/profile/me", headers=auth_headers(AGENT))

    assert response.status_code == 404
    assert response.json() == {"message": "Agent profile not found"}


@pytest.mark.integration
@pytest.mark.asyncio
async def test_update_me_multipart(api_client, make_profile):
    await make_profile(AGENT, agency_name="Acme Realty")

    response = await api_client.put(
        "/api/agents/profile/me",
        headers=auth_headers(AGENT),
        data={"phone": "0802", "language": ["English", "Hausa"]},
        files={"agencyLogo": ("logo.png", b"logo", "image/png")},
    )

    assert response.status_code == 200
    profile = response.json()["profile"]
    assert profile["phone"] == "0802"
    assert profile["languages"] == ["English", "Hausa"]
    assert "/agents/logos/" in profile["agencyLogo"]


@pytest.mark.integration
@pytest.mark.asyncio
async def test_get_agent_by_id_static_routes_not_shadowed(api_client, make_profile, fake_auth):
    """Test /all is not swallowed by /{agent_id}."""
    await make_profile(AGENT)

    all_agents = await api_client.get("/api/agents/profile/all")
    one = await api_client.get(f"/api/agents/profile/{AGENT}")
    missing = await api_client.get("/api/agents/profile/ghost")

    assert all_agents.status_code == 200
    assert all_agents.json()["count"] == 1
    assert one.status_code == 200
    assert one.json()["profile"]["userId"] == AGENT
    assert missing.status_code == 404


@pytest.mark.integration
@pytest.mark.asyncio
async def test_batch_requires_ids(api_client):
    response = await api_client.post("/api/agents/profile/batch", json={"ids": []})

    assert response.status_code == 400
    assert response.json() == {"message": "No agent IDs provided"}


@pytest.mark.integration
@pytest.mark.asyncio
async def test_referral_flow(api_client, make_profile):
    """Test code creation, repeated tracking and the referral report."""
    await make_profile(AGENT)
    headers = auth_headers(AGENT)

    code = (await api_client.get("/api/agents/profile/code", headers=headers)).json()["code"]
    same = (await api_client.get("/api/agents/profile/code", headers=headers)).json()["code"]
    assert code == same

    first = await api_client.post("/api/agents/profile/track", json={"refCode": code, "newUserId": "friend"})
    second = await api_client.post("/api/agents/profile/track", json={"refCode": code, "newUserId": "friend"})

    assert first.status_code == 200
    assert first.json()["rewardAdded"] is True
    assert first.json()["reward"] == 500
    assert second.status_code == 200
    assert second.json()["rewardAdded"] is False

    data = (await api_client.get("/api/agents/profile/referraldata", headers=headers)).json()
    assert data["code"] == code
    assert data["totalEarnings"] == 500
    assert data["totalReferrals"] == 1
    assert data["referredUsers"][0]["userId"] == "friend"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_track_with_unknown_code(api_client):
    response = await api_client.post("/api/agents/profile/track", json={"refCode": "NOPE", "newUserId": "x"})

    assert response.status_code == 404
    assert response.json() == {"message": "Invalid referral code"}


@pytest.mark.integration
@pytest.mark.asyncio
async def test_track_missing_fields(api_client):
    response = await api_client.post("/api/agents/profile/track", json={})

    assert response.status_code == 400


@pytest.mark.integration
@pytest.mark.asyncio
async def test_overview(api_client, make_profile, fake_auth):
    await make_profile(AGENT)
    fake_auth.add_user(AGENT, name="Ada")

    response = await api_client.get("/api/agents/profile/overview", headers=auth_headers(AGENT))

    assert response.status_code == 200
    assert response.json()["stats"]["totalProperties"] == 0
    assert response.json()["agent"]["name"] == "Ada"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_record_activity_is_admin_only(api_client, make_profile):
    await make_profile(AGENT)
    body = {"kind": "sales", "propertyId": "p1", "amount": 1000000}

    forbidden = await api_client.post(f"/api/agents/profile/{AGENT}/activity", json=body, headers=auth_headers(AGENT))
    allowed = await api_client.post(
        f"/api/agents/profile/{AGENT}/activity", json=body, headers=auth_headers("root", role="admin")
    )

    assert forbidden.status_code == 403
    assert forbidden.json() == {"message": "Admin access required"}
    assert allowed.status_code == 200
    profile = allowed.json()["profile"]
    assert profile["salesTotal"] == 1
    assert profile["recentSales"][0]["propertyId"] == "p1"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_validation_errors_are_400(api_client, make_profile):
    await make_profile(AGENT)

    response = await api_client.post(
        f"/api/agents/profile/{AGENT}/activity",
        json={"kind": "leased"},
        headers=auth_headers("root", role="admin"),
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid request"
