"""
Ranking view over the blog registry.

Most-liked first; among equal like counts the entry created first wins.
Computed on every read, never stored, so a like is visible on the next
listing without any re-indexing.
"""
from typing import Iterable

from .models import Blog


def ranking_key(blog: Blog) -> tuple[int, int]:
    return (-blog.likes, blog.id)


def ordered_blogs() -> list[Blog]:
    """All blogs in ranking order, sorted by the database."""
    return Blog.query.order_by(Blog.likes.desc(), Blog.id.asc()).all()


def rank_blogs(blogs: Iterable[Blog]) -> list[Blog]:
    """Apply the same ordering to an already loaded collection."""
    return sorted(blogs, key=ranking_key)
