"""
Stable error codes and their HTTP translation.

Service functions report failures as one of these codes; the blueprints
turn them into `{"error": code, "message": text}` responses.
"""
from flask import jsonify

INVALID_INPUT = 'invalid_input'
DUPLICATE_HANDLE = 'duplicate_handle'
INVALID_CREDENTIALS = 'invalid_credentials'
UNAUTHENTICATED = 'unauthenticated'
FORBIDDEN = 'forbidden'
NOT_FOUND = 'not_found'
NO_SUCH_SESSION = 'no_such_session'
RATE_LIMITED = 'rate_limited'

ERROR_STATUS = {
    INVALID_INPUT: 400,
    DUPLICATE_HANDLE: 409,
    INVALID_CREDENTIALS: 401,
    UNAUTHENTICATED: 401,
    FORBIDDEN: 403,
    NOT_FOUND: 404,
    NO_SUCH_SESSION: 404,
    RATE_LIMITED: 429,
}


def error_response(error_code: str, message: str):
    """Build a JSON error response; unknown codes are treated as 400."""
    return jsonify({'error': error_code, 'message': message}), ERROR_STATUS.get(error_code, 400)


def result_error_response(result):
    """Translate a failed service result (error_code + error) into a response."""
    return error_response(result.error_code, result.error)
