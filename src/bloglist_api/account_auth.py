"""
Account authentication service.

Handles:
- Account registration (unique handle, bcrypt-hashed password)
- Login: credential check and session token issuance
- Caller resolution from a Bearer token
- Logout (session removal)
- Audit logging of security-relevant events

Login Flow:
1. Client POSTs username + password to /api/login
2. If valid, a random token is minted; its SHA-256 is stored in user_sessions
3. Client sends `Authorization: Bearer <token>` on later requests
4. POST /api/logout deletes the session row
"""
import logging
from datetime import timedelta
from functools import wraps
from typing import NamedTuple, Optional

from flask import current_app, g, has_request_context, request
from sqlalchemy.exc import IntegrityError

from . import errors
from .models import (
    Account,
    ActivityLog,
    UserSession,
    check_dummy_password,
    db,
    generate_session_token,
    hash_session_token,
    utcnow,
    validate_name,
    validate_password,
    validate_username,
)

logger = logging.getLogger(__name__)

DEFAULT_SESSION_LIFETIME = 86400  # seconds

# Same message for unknown handle and wrong password (no account enumeration)
INVALID_CREDENTIALS_MESSAGE = "Invalid username or password"


class RegistrationResult(NamedTuple):
    """Result of registration attempt."""
    success: bool
    account: Optional[Account] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    field: Optional[str] = None  # Which field had error (for form validation)


class LoginResult(NamedTuple):
    """Result of login attempt."""
    success: bool
    account: Optional[Account] = None
    token: Optional[str] = None  # Raw token, only ever returned here
    error: Optional[str] = None
    error_code: Optional[str] = None


class SessionResult(NamedTuple):
    """Result of ending a session."""
    success: bool
    error: Optional[str] = None
    error_code: Optional[str] = None


# ============================================================================
# Registration
# ============================================================================

def register_account(username, name, password) -> RegistrationResult:
    """
    Create a new account.

    The pre-check gives a friendly error for the common case; the unique
    constraint on accounts.username settles concurrent registrations of
    the same handle, and the losing insert is reported as a duplicate.
    """
    for field, (is_valid, error_msg) in (
        ('username', validate_username(username)),
        ('name', validate_name(name)),
        ('password', validate_password(password)),
    ):
        if not is_valid:
            return RegistrationResult(
                success=False,
                error=error_msg,
                error_code=errors.INVALID_INPUT,
                field=field,
            )

    if Account.query.filter_by(username=username).first():
        return _duplicate_handle(username)

    account = Account(username=username, name=name.strip())
    account.set_password(password)

    db.session.add(account)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        logger.info(f"Concurrent registration lost the race for username: {username}")
        return _duplicate_handle(username)

    logger.info(f"Account registered: {username}")
    log_activity('register', 'success', account=account)

    return RegistrationResult(success=True, account=account)


def _duplicate_handle(username: str) -> RegistrationResult:
    log_activity('register', 'denied', error_code=errors.DUPLICATE_HANDLE,
                 reason=f"Username taken: {username}")
    return RegistrationResult(
        success=False,
        error="Username already registered",
        error_code=errors.DUPLICATE_HANDLE,
        field='username',
    )


# ============================================================================
# Login / Sessions
# ============================================================================

def authenticate(username, password) -> LoginResult:
    """
    Verify username and password and open a session.

    Unknown handle and wrong password produce the same error so callers
    cannot tell which handles exist.
    """
    if not isinstance(username, str) or not username or not isinstance(password, str) or not password:
        return LoginResult(
            success=False,
            error="Username and password are required",
            error_code=errors.INVALID_INPUT,
        )

    account = Account.query.filter_by(username=username).first()

    if not account:
        check_dummy_password(password)
        log_activity('login', 'denied', error_code=errors.INVALID_CREDENTIALS,
                     reason=f"Unknown username: {username}")
        return _invalid_credentials()

    if not account.verify_password(password):
        log_activity('login', 'denied', account=account, error_code=errors.INVALID_CREDENTIALS,
                     reason="Invalid password")
        return _invalid_credentials()

    token = generate_session_token()
    lifetime = current_app.config.get('SESSION_LIFETIME', DEFAULT_SESSION_LIFETIME)
    now = utcnow()
    # expired sessions are swept whenever a new one is minted
    purged = (
        UserSession.query
        .filter(UserSession.expires_at <= now)
        .delete(synchronize_session=False)
    )
    if purged:
        logger.info(f"Purged {purged} expired session(s)")

    user_session = UserSession(
        token_hash=hash_session_token(token),
        account_id=account.id,
        created_at=now,
        expires_at=now + timedelta(seconds=lifetime),
    )
    db.session.add(user_session)
    db.session.commit()

    logger.info(f"Login successful: {account.username}")
    log_activity('login', 'success', account=account)

    return LoginResult(success=True, account=account, token=token)


def _invalid_credentials() -> LoginResult:
    return LoginResult(
        success=False,
        error=INVALID_CREDENTIALS_MESSAGE,
        error_code=errors.INVALID_CREDENTIALS,
    )


def resolve_caller(token: Optional[str]) -> Optional[Account]:
    """
    Map a session token to its account.

    Never fails: a missing, unknown or expired token resolves to None
    (anonymous). Read-only; expired rows are left for logout/reset.
    """
    if not token:
        return None

    user_session = UserSession.query.filter_by(token_hash=hash_session_token(token)).first()
    if not user_session:
        return None

    if user_session.is_expired():
        logger.debug(f"Expired session presented for account_id={user_session.account_id}")
        return None

    return user_session.account


def end_session(token: Optional[str]) -> SessionResult:
    """Delete the session for the given token."""
    user_session = None
    if token:
        user_session = UserSession.query.filter_by(token_hash=hash_session_token(token)).first()

    if not user_session:
        return SessionResult(
            success=False,
            error="Session not found",
            error_code=errors.NO_SUCH_SESSION,
        )

    account = user_session.account
    db.session.delete(user_session)
    db.session.commit()

    logger.info(f"Logged out: {account.username}")
    log_activity('logout', 'success', account=account)

    return SessionResult(success=True)


def extract_bearer_token(authorization_header: str | None) -> str | None:
    """
    Extract token from Authorization header.

    Expected format: "Bearer <token>"
    """
    if not authorization_header:
        return None

    parts = authorization_header.split(' ', 1)
    if len(parts) != 2:
        return None

    scheme, token = parts
    if scheme.lower() != 'bearer':
        return None

    return token.strip() or None


def load_caller():
    """
    Resolve the caller for the current request.

    Registered as a before_request hook; sets g.session_token and
    g.account (None for anonymous callers).
    """
    g.session_token = extract_bearer_token(request.headers.get('Authorization'))
    g.account = resolve_caller(g.session_token)


def get_current_account() -> Optional[Account]:
    """Get the caller resolved for this request."""
    return g.get('account')


def require_account_auth(f):
    """
    Decorator for API endpoints requiring an active session.

    Returns 401 Unauthorized for anonymous callers.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if get_current_account() is None:
            return errors.error_response(errors.UNAUTHENTICATED, 'Authentication required')
        return f(*args, **kwargs)

    return decorated_function


# ============================================================================
# Audit
# ============================================================================

def log_activity(
    action: str,
    status: str,
    account: Optional[Account] = None,
    error_code: str | None = None,
    reason: str | None = None,
):
    """Write an ActivityLog row for auditing."""
    source_ip = 'unknown'
    user_agent = None
    if has_request_context():
        source_ip = request.remote_addr or 'unknown'
        user_agent = request.headers.get('User-Agent')

    log_entry = ActivityLog(
        account_id=account.id if account else None,
        action=action,
        source_ip=source_ip,
        user_agent=user_agent,
        status=status,
        error_code=error_code,
        status_reason=reason,
    )

    db.session.add(log_entry)
    db.session.commit()

    if status != 'success':
        logger.warning(f"{action} denied ({error_code}) from {source_ip}: {reason}")
