"""Tests for bookmark CRUD endpoints."""
from httpx import AsyncClient


async def _create(client: AsyncClient, **fields: object) -> dict:
    payload = {"url": "https://example.com/", "title": "Example", **fields}
    response = await client.post("/bookmarks/", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


async def test__create_bookmark__returns_bookmark_with_tags(client: AsyncClient) -> None:
    response = await client.post(
        "/bookmarks/",
        json={
            "url": "https://example.com/article",
            "title": "An article",
            "description": "Worth reading",
            "tags": ["web", "python"],
        },
    )

    assert response.status_code == 201
    data = response.json()
    assert data["url"] == "https://example.com/article"
    assert data["title"] == "An article"
    assert data["description"] == "Worth reading"
    assert [t["name"] for t in data["tags"]] == ["python", "web"]
    assert data["tag_sync"] == {"status": "complete", "failed_tags": []}
    assert "created_at" in data
    assert "updated_at" in data


async def test__create_bookmark__accepts_comma_separated_tags(client: AsyncClient) -> None:
    data = await _create(client, tags="web, python, web")

    assert [t["name"] for t in data["tags"]] == ["python", "web"]


async def test__create_bookmark__stores_url_as_typed(client: AsyncClient) -> None:
    data = await _create(client, url="  https://Example.com/Path?q=a  ")

    assert data["url"] == "https://Example.com/Path?q=a"


async def test__create_bookmark__root_url_without_slash_is_kept(client: AsyncClient) -> None:
    data = await _create(client, url="https://example.com")

    assert data["url"] == "https://example.com"


async def test__create_bookmark__duplicate_url_returns_409(client: AsyncClient) -> None:
    await _create(client, url="https://example.com/dup")

    response = await client.post(
        "/bookmarks/", json={"url": "https://example.com/dup", "title": "Again"},
    )

    assert response.status_code == 409
    assert "already exists" in response.json()["detail"]


async def test__create_bookmark__missing_title_returns_422(client: AsyncClient) -> None:
    response = await client.post(
        "/bookmarks/", json={"url": "https://example.com/", "title": "  "},
    )

    assert response.status_code == 422
    assert "Title is required." in response.text


async def test__create_bookmark__invalid_url_returns_422(client: AsyncClient) -> None:
    response = await client.post("/bookmarks/", json={"url": "not a url", "title": "x"})

    assert response.status_code == 422


async def test__create_bookmark__title_too_long_returns_422(client: AsyncClient) -> None:
    response = await client.post(
        "/bookmarks/", json={"url": "https://example.com/", "title": "x" * 61},
    )

    assert response.status_code == 422


async def test__create_bookmark__description_too_long_returns_422(client: AsyncClient) -> None:
    response = await client.post(
        "/bookmarks/",
        json={"url": "https://example.com/", "title": "x", "description": "d" * 301},
    )

    assert response.status_code == 422


async def test__create_bookmark__tag_too_long_returns_422(client: AsyncClient) -> None:
    response = await client.post(
        "/bookmarks/",
        json={"url": "https://example.com/", "title": "x", "tags": ["t" * 101]},
    )

    assert response.status_code == 422


async def test__list_bookmarks__returns_feed(client: AsyncClient) -> None:
    first = await _create(client, url="https://a.example.com/", tags=["x", "y"])
    second = await _create(client, url="https://b.example.com/", tags=["y"])

    response = await client.get("/bookmarks/")

    assert response.status_code == 200
    data = response.json()
    assert [b["id"] for b in data["bookmarks"]] == [second["id"], first["id"]]
    assert [(t["name"], t["count"]) for t in data["tags"]] == [("y", 2), ("x", 1)]
    assert data["top_tags"] == data["tags"]
    assert data["total"] == 2


async def test__list_bookmarks__filters_by_query_and_tag(client: AsyncClient) -> None:
    python = await _create(
        client, url="https://a.example.com/", title="Python tips", tags=["code"],
    )
    await _create(client, url="https://b.example.com/", title="Cooking", tags=["food"])

    by_query = (await client.get("/bookmarks/", params={"q": "python"})).json()
    by_tag = (await client.get("/bookmarks/", params={"tag": "code"})).json()

    assert [b["id"] for b in by_query["bookmarks"]] == [python["id"]]
    assert [b["id"] for b in by_tag["bookmarks"]] == [python["id"]]
    assert {t["name"] for t in by_tag["tags"]} == {"code", "food"}


async def test__get_bookmark__returns_bookmark(client: AsyncClient) -> None:
    created = await _create(client, tags=["a"])

    response = await client.get(f"/bookmarks/{created['id']}")

    assert response.status_code == 200
    assert response.json()["id"] == created["id"]
    assert [t["name"] for t in response.json()["tags"]] == ["a"]


async def test__get_bookmark__missing_returns_404(client: AsyncClient) -> None:
    response = await client.get("/bookmarks/999999")

    assert response.status_code == 404


async def test__update_bookmark__replaces_fields_and_tags(client: AsyncClient) -> None:
    created = await _create(client, description="old", tags=["a", "b"])

    response = await client.put(
        f"/bookmarks/{created['id']}",
        json={"url": "https://example.com/new", "title": "New", "tags": ["b", "c"]},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["url"] == "https://example.com/new"
    assert data["title"] == "New"
    assert data["description"] is None
    assert [t["name"] for t in data["tags"]] == ["b", "c"]
    assert data["created_at"] == created["created_at"]

    tags = (await client.get("/tags/")).json()["tags"]
    assert [t["name"] for t in tags] == ["b", "c"]


async def test__update_bookmark__duplicate_url_returns_409(client: AsyncClient) -> None:
    await _create(client, url="https://a.example.com/")
    second = await _create(client, url="https://b.example.com/")

    response = await client.put(
        f"/bookmarks/{second['id']}",
        json={"url": "https://a.example.com/", "title": "B"},
    )

    assert response.status_code == 409


async def test__update_bookmark__missing_returns_404(client: AsyncClient) -> None:
    response = await client.put(
        "/bookmarks/999999", json={"url": "https://example.com/", "title": "x"},
    )

    assert response.status_code == 404


async def test__delete_bookmark__returns_204_and_removes(client: AsyncClient) -> None:
    created = await _create(client, tags=["a"])

    response = await client.delete(f"/bookmarks/{created['id']}")

    assert response.status_code == 204
    assert (await client.get(f"/bookmarks/{created['id']}")).status_code == 404
    feed = (await client.get("/bookmarks/")).json()
    assert feed["bookmarks"] == []
    assert feed["tags"] == []


async def test__delete_bookmark__missing_returns_404(client: AsyncClient) -> None:
    response = await client.delete("/bookmarks/999999")

    assert response.status_code == 404


async def test__bookmarks__require_authentication(anonymous_client: AsyncClient) -> None:
    response = await anonymous_client.get("/bookmarks/")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


async def test__create_bookmark__requires_authentication(anonymous_client: AsyncClient) -> None:
    response = await anonymous_client.post(
        "/bookmarks/", json={"url": "https://example.com/", "title": "x"},
    )

    assert response.status_code == 401
