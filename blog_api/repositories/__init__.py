"""
Persistence adapters.

``ResourceRepository`` holds the generic list/find/save/update/delete logic;
the domain repositories add the rules specific to users and posts.
"""

from .base import DEFAULT_PAGE_SIZE, Page, ResourceRepository

__all__ = ["DEFAULT_PAGE_SIZE", "Page", "ResourceRepository"]
