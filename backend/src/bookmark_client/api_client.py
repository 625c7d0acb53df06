"""
Async client for the Bookmarks API.

Front-ends use the bookmark operations at the bottom of this module; the
request helpers above them add the bearer token and raise on error status.
"""

import os
from typing import Any

import httpx


def get_api_base_url() -> str:
    """Get the API base URL from environment."""
    return os.getenv("BOOKMARKS_API_URL", "http://localhost:8000")


def get_default_timeout() -> float:
    """Get the default request timeout."""
    return float(os.getenv("BOOKMARKS_API_TIMEOUT", "30.0"))


def create_client(base_url: str | None = None) -> httpx.AsyncClient:
    """Create an AsyncClient pointed at the API."""
    return httpx.AsyncClient(
        base_url=base_url or get_api_base_url(),
        timeout=get_default_timeout(),
    )


def _auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def api_get(
    client: httpx.AsyncClient,
    path: str,
    token: str,
    params: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Authenticated GET returning the decoded JSON body."""
    response = await client.get(path, params=params, headers=_auth_headers(token))
    response.raise_for_status()
    return response.json()


async def api_post(
    client: httpx.AsyncClient,
    path: str,
    token: str,
    json: dict[str, Any],
) -> dict[str, Any]:
    """Authenticated POST returning the decoded JSON body."""
    response = await client.post(path, json=json, headers=_auth_headers(token))
    response.raise_for_status()
    return response.json()


async def api_put(
    client: httpx.AsyncClient,
    path: str,
    token: str,
    json: dict[str, Any],
) -> dict[str, Any]:
    """Authenticated PUT returning the decoded JSON body."""
    response = await client.put(path, json=json, headers=_auth_headers(token))
    response.raise_for_status()
    return response.json()


async def api_delete(
    client: httpx.AsyncClient,
    path: str,
    token: str,
) -> None:
    """Authenticated DELETE (the API answers 204 with no body)."""
    response = await client.delete(path, headers=_auth_headers(token))
    response.raise_for_status()


def _bookmark_body(
    url: str,
    title: str,
    description: str | None,
    tags: list[str] | str | None,
) -> dict[str, Any]:
    return {
        "url": url,
        "title": title,
        "description": description,
        "tags": tags if tags is not None else [],
    }


async def list_bookmarks(
    client: httpx.AsyncClient,
    token: str,
    q: str | None = None,
    tag: str | None = None,
) -> dict[str, Any]:
    """
    Load the bookmark feed: bookmarks newest first plus the count-ordered tags.

    Args:
        client: Client pointed at the API.
        token: Bearer token of the signed-in user.
        q: Optional text search over title, description and URL.
        tag: Optional tag name the bookmarks must carry.
    """
    params = {key: value for key, value in (("q", q), ("tag", tag)) if value}
    return await api_get(client, "/bookmarks/", token, params=params or None)


async def create_bookmark(
    client: httpx.AsyncClient,
    token: str,
    url: str,
    title: str,
    description: str | None = None,
    tags: list[str] | str | None = None,
) -> dict[str, Any]:
    """
    Save a new bookmark. `tags` may be a list or a comma-separated string.

    Raises:
        httpx.HTTPStatusError: 409 when the URL is already saved, 422 on invalid input.
    """
    return await api_post(
        client, "/bookmarks/", token, _bookmark_body(url, title, description, tags),
    )


async def update_bookmark(
    client: httpx.AsyncClient,
    token: str,
    bookmark_id: int,
    url: str,
    title: str,
    description: str | None = None,
    tags: list[str] | str | None = None,
) -> dict[str, Any]:
    """Replace a bookmark's fields and its full tag set."""
    return await api_put(
        client,
        f"/bookmarks/{bookmark_id}",
        token,
        _bookmark_body(url, title, description, tags),
    )


async def delete_bookmark(client: httpx.AsyncClient, token: str, bookmark_id: int) -> None:
    """Delete one bookmark. Used as the commit step of an optimistic delete."""
    await api_delete(client, f"/bookmarks/{bookmark_id}", token)
