"""Tests for /api/agents/properties endpoints."""

import uuid

import pytest

from app.core.errors import UploadError
from tests.utils.helpers import auth_headers

AGENT = "agent-1"
BASE = "/api/agents/properties"


async def _add(api_client, headers, **form):
    data = {"title": "Plot", "location": "Lekki", "price": "2500000", "type": "Land", "bedrooms": "3"}
    data.update(form)
    return await api_client.post(
        f"{BASE}/add",
        headers=headers,
        data=data,
        files=[
            ("images", ("front.jpg", b"front", "image/jpeg")),
            ("images", ("back.jpg", b"back", "image/jpeg")),
        ],
    )


@pytest.mark.integration
@pytest.mark.asyncio
async def test_add_land_property(api_client, make_profile):
    """Test land listings never carry bedrooms or toilets."""
    await make_profile(AGENT)

    response = await _add(api_client, auth_headers(AGENT), features="Fenced, Gated")

    assert response.status_code == 201
    prop = response.json()["property"]
    assert prop["agentId"] == AGENT
    assert prop["bedrooms"] == 0
    assert prop["toilets"] == 0
    assert prop["features"] == ["Fenced", "Gated"]
    assert len(prop["images"]) == 2
    assert prop["price"] == 2500000


@pytest.mark.integration
@pytest.mark.asyncio
async def test_add_requires_media(api_client):
    response = await api_client.post(
        f"{BASE}/add", headers=auth_headers(AGENT), data={"title": "Flat", "location": "Yaba"}
    )

    assert response.status_code == 400
    assert response.json() == {"message": "At least one image or video is required"}


@pytest.mark.integration
@pytest.mark.asyncio
async def test_add_requires_token(api_client):
    response = await api_client.post(f"{BASE}/add", data={"title": "Flat"})

    assert response.status_code == 401


@pytest.mark.integration
@pytest.mark.asyncio
async def test_single_property_counts_views(api_client, make_profile, fake_auth):
    await make_profile(AGENT)
    fake_auth.add_user(AGENT, name="Ada")
    property_id = (await _add(api_client, auth_headers(AGENT))).json()["property"]["propertyId"]

    await api_client.get(f"{BASE}/single/{property_id}")
    response = await api_client.get(f"{BASE}/single/{property_id}")

    assert response.status_code == 200
    assert response.json()["property"]["views"] == 2
    assert response.json()["agent"]["name"] == "Ada"
    assert response.json()["agent"]["profile"]["userId"] == AGENT


@pytest.mark.integration
@pytest.mark.asyncio
async def test_single_property_not_found(api_client):
    response = await api_client.get(f"{BASE}/single/{uuid.uuid4()}")

    assert response.status_code == 404
    assert response.json() == {"message": "Property not found"}


@pytest.mark.integration
@pytest.mark.asyncio
async def test_single_property_bad_id(api_client):
    response = await api_client.get(f"{BASE}/single/not-a-uuid")

    assert response.status_code == 400


@pytest.mark.integration
@pytest.mark.asyncio
async def test_all_properties_empty(api_client):
    response = await api_client.get(f"{BASE}/all")

    assert response.status_code == 200
    assert response.json() == {"properties": [], "message": "No properties found"}


@pytest.mark.integration
@pytest.mark.asyncio
async def test_filter(api_client, make_profile):
    await make_profile(AGENT)
    headers = auth_headers(AGENT)
    await _add(api_client, headers, title="Cheap plot", price="300000", transactionType="Buy")
    await _add(api_client, headers, title="Big plot", price="9000000", transactionType="Buy")

    response = await api_client.get(f"{BASE}/filter", params={"priceRange": "100k-500k", "transactionType": "Buy"})

    assert response.status_code == 200
    assert [p["title"] for p in response.json()["properties"]] == ["Cheap plot"]


@pytest.mark.integration
@pytest.mark.asyncio
async def test_filter_bad_price_range(api_client):
    response = await api_client.get(f"{BASE}/filter", params={"priceRange": "cheap"})

    assert response.status_code == 400


@pytest.mark.integration
@pytest.mark.asyncio
async def test_update_and_delete_only_by_owner(api_client, make_profile):
    await make_profile(AGENT)
    property_id = (await _add(api_client, auth_headers(AGENT))).json()["property"]["propertyId"]

    stranger = await api_client.put(f"{BASE}/{property_id}", headers=auth_headers("other"), data={"title": "Mine"})
    updated = await api_client.put(
        f"{BASE}/{property_id}", headers=auth_headers(AGENT), data={"title": "Renamed", "type": "Duplex", "bedrooms": "4"}
    )
    gone = await api_client.delete(f"{BASE}/delete/{property_id}", headers=auth_headers("other"))
    deleted = await api_client.delete(f"{BASE}/delete/{property_id}", headers=auth_headers(AGENT))

    assert stranger.status_code == 404
    assert updated.status_code == 200
    assert updated.json()["property"]["title"] == "Renamed"
    assert updated.json()["property"]["bedrooms"] == 4
    assert gone.status_code == 404
    assert deleted.status_code == 200
    assert deleted.json() == {"message": "Property deleted successfully"}


@pytest.mark.integration
@pytest.mark.asyncio
async def test_delete_media(api_client, make_profile, storage):
    """Test media removal routes take JSON bodies and return what remains."""
    await make_profile(AGENT)
    headers = auth_headers(AGENT)
    prop = (await _add(api_client, headers, youtubeVideos="https://www.youtube.com/watch?v=abc")).json()["property"]
    first, second = prop["images"]

    image = await api_client.request(
        "DELETE", f"{BASE}/delete-image", headers=headers,
        json={"propertyId": prop["propertyId"], "imageUrl": first},
    )
    youtube = await api_client.request(
        "DELETE", f"{BASE}/delete-youtube", headers=headers,
        json={"propertyId": prop["propertyId"], "youtubeUrl": "https://www.youtube.com/watch?v=abc"},
    )

    assert image.status_code == 200
    assert image.json() == {"message": "Image deleted successfully", "images": [second]}
    assert youtube.status_code == 200
    assert youtube.json()["youtubeVideos"] == []
    storage.delete.assert_not_awaited()


@pytest.mark.integration
@pytest.mark.asyncio
async def test_delete_videos_destroys_assets(api_client, make_profile, storage):
    await make_profile(AGENT)
    headers = auth_headers(AGENT)
    response = await api_client.post(
        f"{BASE}/add",
        headers=headers,
        data={"title": "Flat", "location": "Yaba"},
        files=[("videos", ("tour.mp4", b"tour", "video/mp4"))],
    )
    prop = response.json()["property"]

    deleted = await api_client.request(
        "DELETE", f"{BASE}/delete-videos", headers=headers,
        json={"propertyId": prop["propertyId"], "videoUrls": prop["videos"]},
    )

    assert deleted.status_code == 200
    assert deleted.json() == {"message": "Videos deleted successfully", "videos": []}
    storage.delete.assert_awaited_once()


@pytest.mark.integration
@pytest.mark.asyncio
async def test_my_properties_and_public_agent(api_client, make_profile):
    await make_profile(AGENT)
    await _add(api_client, auth_headers(AGENT))

    mine = await api_client.get(f"{BASE}/my-properties", headers=auth_headers(AGENT))
    public = await api_client.get(f"{BASE}/{AGENT}")
    missing = await api_client.get(f"{BASE}/ghost")

    assert mine.status_code == 200
    assert len(mine.json()["properties"]) == 1
    assert public.status_code == 200
    assert public.json()["properties"][0]["agentId"] == AGENT
    assert public.json()["agent"]["profile"]["userId"] == AGENT
    assert missing.status_code == 404


@pytest.mark.integration
@pytest.mark.asyncio
async def test_add_with_video_when_youtube_fails(api_client, make_profile, video):
    await make_profile(AGENT)
    video.insert.side_effect = UploadError("YouTube not configured")

    response = await api_client.post(
        f"{BASE}/add",
        headers=auth_headers(AGENT),
        data={"title": "Flat", "location": "Yaba"},
        files=[("videos", ("tour.mp4", b"tour", "video/mp4"))],
    )

    assert response.status_code == 201
    assert len(response.json()["property"]["videos"]) == 1
    assert response.json()["property"]["youtubeVideos"] == []
