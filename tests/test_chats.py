"""Tests for chat rooms, offers and the contact filter."""
from pathlib import Path

import pytest

from monlyking.core.config import settings

WITHHELD = "[message hidden: contact information is not allowed]"


async def send(client, sender, recipient, **message):
    return await client.post(
        f"/api/v1/chats/{recipient['id']}/messages",
        json=message,
        headers=sender["headers"],
    )


@pytest.mark.asyncio
async def test_send_and_read(client, buyer, seller):
    response = await send(client, buyer, seller, content="Is it still available?")
    assert response.status_code == 201
    message = response.json()
    assert message["room"] == "_".join(sorted([str(buyer["id"]), str(seller["id"])]))
    assert message["is_filtered"] is False

    response = await client.get(f"/api/v1/chats/{buyer['id']}/messages", headers=seller["headers"])
    history = response.json()
    assert [m["content"] for m in history] == ["Is it still available?"]


@pytest.mark.asyncio
async def test_cannot_message_self(client, buyer):
    response = await send(client, buyer, buyer, content="hello me")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_empty_text_rejected(client, buyer, seller):
    response = await send(client, buyer, seller, content="   ")
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_contact_info_is_withheld_from_recipient(client, buyer, seller):
    response = await send(client, buyer, seller, content="add me on discord")
    message = response.json()
    assert message["is_filtered"] is True
    assert message["filtered_reason"] == "Contact information detected"
    assert message["content"] == "add me on discord"

    response = await client.get(f"/api/v1/chats/{buyer['id']}/messages", headers=seller["headers"])
    assert response.json()[0]["content"] == WITHHELD


@pytest.mark.asyncio
async def test_offers(client, buyer, seller, listing):
    response = await send(client, buyer, seller, type="offer", offer_price="900", product_id=listing["id"])
    assert response.status_code == 201
    assert response.json()["offer_price"] == 900

    response = await send(
        client, seller, buyer,
        type="counter_offer", offer_price="950", original_price="900", content="Meet in the middle",
    )
    assert response.status_code == 201
    assert response.json()["original_price"] == 900

    response = await send(client, buyer, seller, type="offer")
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_room_list_tracks_unread(client, buyer, seller):
    await send(client, buyer, seller, content="first")
    await send(client, buyer, seller, content="second")

    response = await client.get("/api/v1/chats/", headers=seller["headers"])
    rooms = response.json()
    assert len(rooms) == 1
    assert rooms[0]["other_user_id"] == buyer["id"]
    assert rooms[0]["unread_count"] == 2
    assert rooms[0]["last_message"]["content"] == "second"

    await client.get(f"/api/v1/chats/{buyer['id']}/messages", headers=seller["headers"])

    response = await client.get("/api/v1/chats/", headers=seller["headers"])
    assert response.json()[0]["unread_count"] == 0

    response = await client.get("/api/v1/chats/", headers=buyer["headers"])
    assert response.json()[0]["unread_count"] == 0


@pytest.mark.asyncio
async def test_chat_image_upload(client, buyer, seller):
    response = await client.post(
        f"/api/v1/uploads/chat-images/{seller['id']}",
        files={"file": ("proof.png", b"\x89PNG fake image", "image/png")},
        headers=buyer["headers"],
    )
    assert response.status_code == 201
    url = response.json()["url"]
    room = "_".join(sorted([str(buyer["id"]), str(seller["id"])]))
    assert url.startswith(f"/uploads/chat-images/{room}/")

    response = await send(client, buyer, seller, type="image", image_url=url)
    assert response.status_code == 201
    assert response.json()["image_url"] == url


@pytest.mark.asyncio
async def test_upload_rejects_other_extensions(client, buyer):
    response = await client.post(
        "/api/v1/uploads/listing-images",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=buyer["headers"],
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_upload_is_written_to_upload_dir(client, buyer):
    response = await client.post(
        "/api/v1/uploads/listing-images",
        files={"file": ("rank card.png", b"\x89PNG" + b"x" * 200_000, "image/png")},
        headers=buyer["headers"],
    )
    assert response.status_code == 201
    url = response.json()["url"]
    assert url.startswith(f"/uploads/listing-images/{buyer['id']}/")

    stored = Path(settings.UPLOAD_DIR) / url.removeprefix("/uploads/")
    assert stored.read_bytes() == b"\x89PNG" + b"x" * 200_000


@pytest.mark.asyncio
async def test_oversized_upload_rejected_and_discarded(client, buyer, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 100_000)

    response = await client.post(
        "/api/v1/uploads/listing-images",
        files={"file": ("huge.png", b"x" * 300_000, "image/png")},
        headers=buyer["headers"],
    )
    assert response.status_code == 413

    folder = Path(settings.UPLOAD_DIR) / "listing-images" / str(buyer["id"])
    assert not any(p.name.endswith("huge.png") for p in folder.glob("*"))
