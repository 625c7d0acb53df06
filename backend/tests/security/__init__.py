"""
Security tests for the Bookmarks API.

Covers authorization across users: a bookmark id or tag name belonging to
another user must behave exactly like one that does not exist.
"""
