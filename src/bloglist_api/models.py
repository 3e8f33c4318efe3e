"""
Database models for bloglist-api.

- Account: registered user (unique handle, display name, bcrypt hash)
- UserSession: opaque login token bound to one account
- Blog: a submitted blog link with its like counter
- ActivityLog: audit trail of security-relevant events

Session tokens: secrets.token_urlsafe(32), returned once to the client.
Only the SHA-256 hex digest is stored, so a leaked database cannot be
replayed as live sessions.
"""
import hashlib
import logging
import re
import secrets
from datetime import datetime, timezone
from typing import Any, Optional

import bcrypt
from flask import current_app, has_app_context
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import CheckConstraint

logger = logging.getLogger(__name__)

db = SQLAlchemy()

SESSION_TOKEN_BYTES = 32

# Username: 3-32 chars, letters/digits/dot/dash/underscore
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 32
USERNAME_PATTERN = re.compile(r'^[a-zA-Z0-9\-._]+$')

NAME_MAX_LENGTH = 100

# bcrypt only looks at the first 72 bytes
PASSWORD_MIN_LENGTH = 3
PASSWORD_MAX_BYTES = 72
DEFAULT_BCRYPT_ROUNDS = 12

BLOG_TITLE_MAX_LENGTH = 200
BLOG_AUTHOR_MAX_LENGTH = 100
BLOG_URL_MAX_LENGTH = 2048


def utcnow() -> datetime:
    """Naive UTC timestamp (SQLite stores datetimes without tzinfo)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def validate_username(username: Any) -> tuple[bool, str | None]:
    """
    Validate handle format.

    Returns:
        (is_valid, error_message)
    """
    if not isinstance(username, str) or not username.strip():
        return False, "Username is required"

    if len(username) < USERNAME_MIN_LENGTH:
        return False, f"Username must be at least {USERNAME_MIN_LENGTH} characters"

    if len(username) > USERNAME_MAX_LENGTH:
        return False, f"Username cannot exceed {USERNAME_MAX_LENGTH} characters"

    if not USERNAME_PATTERN.match(username):
        return False, "Username may only contain letters, numbers, hyphens, dots, or underscores"

    return True, None


def validate_name(name: Any) -> tuple[bool, str | None]:
    if not isinstance(name, str) or not name.strip():
        return False, "Name is required"
    if len(name) > NAME_MAX_LENGTH:
        return False, f"Name cannot exceed {NAME_MAX_LENGTH} characters"
    return True, None


def validate_password(password: Any) -> tuple[bool, str | None]:
    """
    Validate password length.

    Rules:
    - At least 3 characters
    - At most 72 bytes once UTF-8 encoded (bcrypt limit)

    Returns:
        (is_valid, error_message)
    """
    if not isinstance(password, str) or not password:
        return False, "Password is required"

    if len(password) < PASSWORD_MIN_LENGTH:
        return False, f"Password must be at least {PASSWORD_MIN_LENGTH} characters"

    if len(password.encode('utf-8')) > PASSWORD_MAX_BYTES:
        return False, f"Password cannot exceed {PASSWORD_MAX_BYTES} bytes"

    return True, None


def validate_blog_fields(title: Any, author: Any, url: Any) -> tuple[bool, str | None]:
    """Check the three required blog fields; first failure wins."""
    for label, value, limit in (
        ('Title', title, BLOG_TITLE_MAX_LENGTH),
        ('Author', author, BLOG_AUTHOR_MAX_LENGTH),
        ('Url', url, BLOG_URL_MAX_LENGTH),
    ):
        if not isinstance(value, str) or not value.strip():
            return False, f"{label} is required"
        if len(value) > limit:
            return False, f"{label} cannot exceed {limit} characters"
    return True, None


def generate_session_token() -> str:
    """Generate a new opaque session token (show once, store hash)."""
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)


def hash_session_token(token: str) -> str:
    """SHA-256 digest used as the lookup key for a session token."""
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def bcrypt_rounds() -> int:
    if has_app_context():
        return current_app.config.get('BCRYPT_ROUNDS', DEFAULT_BCRYPT_ROUNDS)
    return DEFAULT_BCRYPT_ROUNDS


# One throwaway hash per cost factor, built on first use
_dummy_password_hashes: dict[int, bytes] = {}


def check_dummy_password(password: str) -> bool:
    """
    Run a bcrypt check against a throwaway hash and return False.

    Used when no account matches, so an unknown handle costs as much
    as a wrong password.
    """
    rounds = bcrypt_rounds()
    dummy_hash = _dummy_password_hashes.get(rounds)
    if dummy_hash is None:
        dummy_hash = bcrypt.hashpw(secrets.token_urlsafe(16).encode('utf-8'), bcrypt.gensalt(rounds))
        _dummy_password_hashes[rounds] = dummy_hash
    bcrypt.checkpw(password.encode('utf-8')[:PASSWORD_MAX_BYTES], dummy_hash)
    return False


class Account(db.Model):
    """
    Registered user.

    The handle (`username`) is unique and immutable. `name` is only used
    for display ("Rooty logged in").
    """
    __tablename__ = 'accounts'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(USERNAME_MAX_LENGTH), unique=True, nullable=False, index=True)
    name = db.Column(db.String(NAME_MAX_LENGTH), nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    blogs = db.relationship('Blog', back_populates='owner', order_by='Blog.id')
    sessions = db.relationship('UserSession', back_populates='account', cascade='all, delete-orphan')

    def set_password(self, password: str):
        """Hash and set password."""
        self.password_hash = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt(bcrypt_rounds())).decode('utf-8')

    def verify_password(self, password: str) -> bool:
        """Verify password against hash."""
        try:
            return bcrypt.checkpw(password.encode('utf-8'), self.password_hash.encode('utf-8'))
        except (ValueError, TypeError):
            return False

    def to_dict(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'username': self.username,
            'name': self.name,
        }

    def __repr__(self):
        return f'<Account {self.username}>'


class UserSession(db.Model):
    """Login session: one token hash bound to exactly one account."""
    __tablename__ = 'user_sessions'

    id = db.Column(db.Integer, primary_key=True)
    token_hash = db.Column(db.String(64), unique=True, nullable=False, index=True)
    account_id = db.Column(db.Integer, db.ForeignKey('accounts.id', ondelete='CASCADE'),
                           nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    expires_at = db.Column(db.DateTime, nullable=False)

    account = db.relationship('Account', back_populates='sessions')

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utcnow()) >= self.expires_at

    def __repr__(self):
        return f'<UserSession account_id={self.account_id}>'


class Blog(db.Model):
    """
    Blog entry.

    `id` is autoincrement and doubles as the creation-order marker used to
    break ties between equally liked entries. `user_id` references the
    creating account; it is not an ownership cascade.
    """
    __tablename__ = 'blogs'
    __table_args__ = (
        CheckConstraint('likes >= 0', name='check_likes_non_negative'),
        {'sqlite_autoincrement': True},
    )

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(BLOG_TITLE_MAX_LENGTH), nullable=False)
    author = db.Column(db.String(BLOG_AUTHOR_MAX_LENGTH), nullable=False)
    url = db.Column(db.String(BLOG_URL_MAX_LENGTH), nullable=False)
    likes = db.Column(db.Integer, nullable=False, default=0)
    user_id = db.Column(db.Integer, db.ForeignKey('accounts.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    owner = db.relationship('Account', back_populates='blogs')

    def to_dict(self, include_owner: bool = True) -> dict[str, Any]:
        data = {
            'id': self.id,
            'title': self.title,
            'author': self.author,
            'url': self.url,
            'likes': self.likes,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        if include_owner:
            data['user'] = self.owner.to_dict() if self.owner else None
        return data

    def __repr__(self):
        return f'<Blog {self.id} {self.title!r} likes={self.likes}>'


class ActivityLog(db.Model):
    """
    Activity log (audit trail).

    Records logins, registrations, logouts, deletions and resets.
    Not exposed through the public API.
    """
    __tablename__ = 'activity_log'

    id = db.Column(db.Integer, primary_key=True)
    account_id = db.Column(db.Integer, db.ForeignKey('accounts.id', ondelete='SET NULL'), index=True)

    action = db.Column(db.String(50), nullable=False, index=True)  # 'login', 'blog_delete', etc.
    source_ip = db.Column(db.String(45), nullable=False, index=True)
    user_agent = db.Column(db.Text)

    status = db.Column(db.String(20), nullable=False, index=True)  # 'success', 'denied'
    error_code = db.Column(db.String(30), index=True)
    status_reason = db.Column(db.Text)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    account = db.relationship('Account')

    def __repr__(self):
        return f'<ActivityLog {self.action} {self.status}>'
