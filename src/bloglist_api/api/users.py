"""
Users Blueprint.

Routes:
- POST /api/users - Register an account
- GET  /api/users - List accounts with their blogs
"""
import logging

from flask import Blueprint, jsonify

from .. import errors
from ..account_auth import register_account
from ..models import Account
from ..ranking import rank_blogs
from .request_data import get_json_object

logger = logging.getLogger(__name__)

users_bp = Blueprint('users', __name__, url_prefix='/api')


@users_bp.route('/users', methods=['POST'])
def create_user():
    """
    Register an account.

    Body: {"user": ..., "name": ..., "password": ...}
    "username" is accepted in place of "user".
    """
    data = get_json_object()
    if data is None:
        return errors.error_response(errors.INVALID_INPUT, 'Request body must be a JSON object')

    username = data.get('user', data.get('username'))
    result = register_account(username, data.get('name'), data.get('password'))

    if not result.success:
        return errors.result_error_response(result)

    return jsonify(result.account.to_dict()), 201


@users_bp.route('/users', methods=['GET'])
def list_users():
    """List accounts, each with its own blogs in ranking order."""
    accounts = Account.query.order_by(Account.id).all()

    return jsonify([{
        **account.to_dict(),
        'blogs': [blog.to_dict(include_owner=False) for blog in rank_blogs(account.blogs)],
    } for account in accounts])
