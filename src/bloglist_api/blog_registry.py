"""
Blog registry: lifecycle of blog entries.

Any authenticated caller may create and like entries; only the account
that created an entry may delete it. The ownership check lives here, not
in the client, which merely hides the delete button from non-owners.

Entry states: created -> liked (any number of times) -> deleted.
A deleted id answers not_found to every later like/delete.
"""
import logging
from typing import NamedTuple, Optional

from . import errors
from .account_auth import log_activity
from .models import Account, Blog, db, validate_blog_fields

logger = logging.getLogger(__name__)

# SQLite INTEGER is a signed 64-bit value
MAX_BLOG_ID = 2 ** 63 - 1


class BlogResult(NamedTuple):
    """Result of a blog mutation."""
    success: bool
    blog: Optional[Blog] = None
    error: Optional[str] = None
    error_code: Optional[str] = None


def _unauthenticated() -> BlogResult:
    return BlogResult(success=False, error="Authentication required", error_code=errors.UNAUTHENTICATED)


def _not_found(blog_id) -> BlogResult:
    return BlogResult(success=False, error=f"Blog {blog_id} not found", error_code=errors.NOT_FOUND)


def _storable_id(blog_id) -> bool:
    return 1 <= blog_id <= MAX_BLOG_ID



def create_blog(caller: Optional[Account], title, author, url) -> BlogResult:
    """
    Create a blog entry owned by the caller.

    `author` is free text and unrelated to the caller's display name.
    The autoincrement id gives every entry a unique creation-order slot.
    """
    if caller is None:
        return _unauthenticated()

    is_valid, error_msg = validate_blog_fields(title, author, url)
    if not is_valid:
        return BlogResult(success=False, error=error_msg, error_code=errors.INVALID_INPUT)

    blog = Blog(
        title=title.strip(),
        author=author.strip(),
        url=url.strip(),
        likes=0,
        user_id=caller.id,
    )
    db.session.add(blog)
    db.session.commit()

    logger.info(f"Blog created: id={blog.id} by {caller.username}")
    log_activity('blog_create', 'success', account=caller)

    return BlogResult(success=True, blog=blog)


def like_blog(caller: Optional[Account], blog_id: int) -> BlogResult:
    """
    Add one like to an entry.

    The increment is a single UPDATE ... SET likes = likes + 1 so
    concurrent likers are serialized by the database; no read-modify-write
    happens in Python.
    """
    if caller is None:
        return _unauthenticated()

    if not _storable_id(blog_id):
        return _not_found(blog_id)

    updated = (
        Blog.query
        .filter(Blog.id == blog_id)
        .update({Blog.likes: Blog.likes + 1}, synchronize_session=False)
    )
    db.session.commit()

    if not updated:
        return _not_found(blog_id)

    blog = db.session.get(Blog, blog_id, populate_existing=True)
    if blog is None:
        # deleted between the increment and the reload
        return _not_found(blog_id)

    logger.debug(f"Blog {blog_id} liked by {caller.username}: likes={blog.likes}")

    return BlogResult(success=True, blog=blog)


def delete_blog(caller: Optional[Account], blog_id: int) -> BlogResult:
    """
    Delete an entry. Only its creator may do so.

    Returns forbidden (entry untouched) for any other caller.
    """
    if caller is None:
        return _unauthenticated()

    if not _storable_id(blog_id):
        return _not_found(blog_id)

    blog = db.session.get(Blog, blog_id)
    if blog is None:
        return _not_found(blog_id)

    if blog.user_id != caller.id:
        log_activity('blog_delete', 'denied', account=caller, error_code=errors.FORBIDDEN,
                     reason=f"Blog {blog_id} is owned by account_id={blog.user_id}")
        return BlogResult(
            success=False,
            error="Only the creator can delete this blog",
            error_code=errors.FORBIDDEN,
        )

    db.session.delete(blog)
    db.session.commit()

    logger.info(f"Blog deleted: id={blog_id} by {caller.username}")
    log_activity('blog_delete', 'success', account=caller, reason=f"Blog {blog_id}")

    return BlogResult(success=True)


def get_blog(blog_id: int) -> Optional[Blog]:
    """Return a single entry or None."""
    if not _storable_id(blog_id):
        return None
    return db.session.get(Blog, blog_id)


def list_blogs() -> list[Blog]:
    """All entries, in storage order. Use ranking.ordered_blogs() for display order."""
    return Blog.query.all()
