"""Python client for the Bookmarks API, including optimistic delete with undo."""
from bookmark_client.api_client import (
    create_bookmark,
    create_client,
    delete_bookmark,
    list_bookmarks,
    update_bookmark,
)
from bookmark_client.optimistic_delete import Notice, OptimisticDeleteController

__all__ = [
    "Notice",
    "OptimisticDeleteController",
    "create_bookmark",
    "create_client",
    "delete_bookmark",
    "list_bookmarks",
    "update_bookmark",
]
