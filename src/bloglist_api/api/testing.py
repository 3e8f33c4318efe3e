"""
Testing Blueprint.

Routes:
- POST /api/testing/reset - Wipe all accounts, sessions, blogs and audit rows

Only registered by create_app() when testing endpoints are enabled
(FLASK_ENV=test/local_test or ENABLE_TESTING_API=true). In any other
environment the route does not exist.
"""
import logging

from flask import Blueprint, request

from ..account_auth import log_activity
from ..database import reset_database

logger = logging.getLogger(__name__)

testing_bp = Blueprint('testing', __name__, url_prefix='/api/testing')


@testing_bp.route('/reset', methods=['POST'])
def reset():
    deleted = reset_database()
    logger.warning(f"Testing reset requested from {request.remote_addr}: {deleted}")
    # first row of the fresh audit trail
    log_activity('reset', 'success', reason=f"Deleted {deleted}")
    return '', 204
