"""
System smoke test: the HTTP surface end to end, in-process with SQLite.

Covers health, registration and login, the article lifecycle with its
notification fan-out, comments, and the error body mapping.
"""

import uuid

import pytest

API = "/api/v1"


def article_body(**overrides):
    body = {
        "title": "Server maintenance window",
        "content": "<p>Saturday 02:00-04:00</p><script>alert(1)</script>",
        "excerpt": "",
        "section_id": "euc",
        "subsection_id": "incident-management",
        "tags": ["Maintenance", "servers"],
    }
    body.update(overrides)
    return body


@pytest.mark.asyncio
async def test_health_and_request_id(client):
    response = await client.get("/health", headers={"X-Request-ID": "smoke-1"})

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.headers["X-Request-ID"] == "smoke-1"


@pytest.mark.asyncio
async def test_register_then_login(client, api_world):
    created = await client.post(
        f"{API}/users",
        json={"name": "New Hire", "email": "new.hire@example.com", "password": "welcome"},
    )
    assert created.status_code == 201
    assert created.json()["role"] == "user"

    duplicate = await client.post(
        f"{API}/users",
        json={"name": "Again", "email": "NEW.HIRE@example.com", "password": "welcome"},
    )
    assert duplicate.status_code == 400
    assert duplicate.json()["kind"] == "auth_error"

    login = await client.post(f"{API}/login", json={"email": "new.hire@example.com", "password": "welcome"})
    assert login.status_code == 200
    token = login.json()["access_token"]

    me = await client.get(f"{API}/users/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["email"] == "new.hire@example.com"

    bad = await client.post(f"{API}/login", json={"email": "new.hire@example.com", "password": "nope"})
    assert bad.status_code == 401


@pytest.mark.asyncio
async def test_publish_comment_and_notify(client, api_world, auth_headers):
    editor = auth_headers(api_world.editor)
    reader = auth_headers(api_world.reader)

    created = await client.post(f"{API}/articles", json=article_body(), headers=editor)
    assert created.status_code == 201
    article = created.json()
    assert "<script>" not in article["content"]
    assert article["excerpt"] == "No excerpt provided."
    assert article["tags"] == ["maintenance", "servers"]

    inbox = await client.get(f"{API}/notifications/{api_world.reader.id}", headers=reader)
    assert inbox.status_code == 200
    assert inbox.json()["unread_count"] == 1
    assert inbox.json()["items"][0]["article_id"] == article["id"]

    comment = await client.post(
        f"{API}/articles/{article['id']}/comments",
        json={"content": "Thanks for the heads up"},
        headers=reader,
    )
    assert comment.status_code == 201

    detail = await client.get(f"{API}/articles/{article['id']}")
    assert [c["content"] for c in detail.json()["comments"]] == ["Thanks for the heads up"]

    editor_inbox = await client.get(f"{API}/notifications/{api_world.editor.id}", headers=editor)
    kinds = [n["type"] for n in editor_inbox.json()["items"]]
    assert kinds == ["comment_on_article"]

    read_all = await client.post(f"{API}/notifications/read-all", headers=reader)
    assert read_all.json()["updated"] == 1


@pytest.mark.asyncio
async def test_drafts_stay_private(client, api_world, auth_headers):
    editor = auth_headers(api_world.editor)

    created = await client.post(f"{API}/articles", json=article_body(status="draft"), headers=editor)
    draft_id = created.json()["id"]

    listed = await client.get(f"{API}/articles", headers=auth_headers(api_world.reader))
    assert draft_id not in [a["id"] for a in listed.json()]

    hidden = await client.get(f"{API}/articles/{draft_id}", headers=auth_headers(api_world.reader))
    assert hidden.status_code == 404
    assert hidden.json()["kind"] == "not_found"

    published = await client.put(
        f"{API}/articles/{draft_id}",
        json=article_body(status="published"),
        headers=editor,
    )
    assert published.json()["status"] == "published"


@pytest.mark.asyncio
async def test_error_mapping(client, api_world, auth_headers):
    unauthenticated = await client.post(f"{API}/articles", json=article_body())
    assert unauthenticated.status_code == 401

    other_section = await client.post(
        f"{API}/articles",
        json=article_body(section_id="hr", subsection_id=None),
        headers=auth_headers(api_world.editor),
    )
    assert other_section.status_code == 403
    assert other_section.json()["kind"] == "permission_denied"

    missing = await client.get(f"{API}/articles/{uuid.uuid4()}")
    assert missing.status_code == 404

    locked = await client.post(
        f"{API}/articles",
        json=article_body(allow_comments=False),
        headers=auth_headers(api_world.admin),
    )
    conflict = await client.post(
        f"{API}/articles/{locked.json()['id']}/comments",
        json={"content": "Hello?"},
        headers=auth_headers(api_world.reader),
    )
    assert conflict.status_code == 409
    assert conflict.json()["kind"] == "conflict"

    guest = await client.post(
        f"{API}/articles/{locked.json()['id']}/comments",
        json={"content": "Hello?"},
        headers=auth_headers(api_world.guest),
    )
    assert guest.status_code == 403

    invalid = await client.put(
        f"{API}/digest/{api_world.reader.id}",
        json={"enabled": True, "frequency": "hourly"},
        headers=auth_headers(api_world.reader),
    )
    assert invalid.status_code == 422
    assert invalid.json()["kind"] == "validation_error"


@pytest.mark.asyncio
async def test_mail_test_endpoint_is_admin_only(client, api_world, auth_headers):
    response = await client.post(
        f"{API}/email-config/test",
        json={"to": "john.user@example.com"},
        headers=auth_headers(api_world.editor),
    )

    assert response.status_code == 403
    assert response.json()["kind"] == "permission_denied"
