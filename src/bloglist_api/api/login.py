"""
Login Blueprint.

Routes:
- POST /api/login  - Exchange username + password for a session token
- GET  /api/login  - Who is the current caller
- POST /api/logout - End the presented session
"""
import logging

from flask import Blueprint, g, jsonify

from .. import errors
from ..account_auth import (
    authenticate,
    end_session,
    get_current_account,
    require_account_auth,
)
from .request_data import get_json_object

logger = logging.getLogger(__name__)

login_bp = Blueprint('login', __name__, url_prefix='/api')


@login_bp.route('/login', methods=['POST'])
def login():
    """
    Body: {"username": ..., "password": ...}

    On success returns {"token", "username", "name"}; the client sends the
    token back as `Authorization: Bearer <token>`.
    """
    data = get_json_object()
    if data is None:
        return errors.error_response(errors.INVALID_INPUT, 'Request body must be a JSON object')

    result = authenticate(data.get('username'), data.get('password'))
    if not result.success:
        return errors.result_error_response(result)

    return jsonify({
        'token': result.token,
        'username': result.account.username,
        'name': result.account.name,
    })


@login_bp.route('/login', methods=['GET'])
@require_account_auth
def whoami():
    """Identity of the logged-in caller (drives "<name> logged in")."""
    return jsonify(get_current_account().to_dict())


@login_bp.route('/logout', methods=['POST'])
def logout():
    """Destroy the caller's current session."""
    if not g.session_token:
        return errors.error_response(errors.UNAUTHENTICATED, 'Authentication required')

    result = end_session(g.session_token)
    if not result.success:
        return errors.result_error_response(result)

    return '', 204
