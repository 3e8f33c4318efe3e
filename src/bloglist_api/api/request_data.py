"""Request body helpers shared by the API blueprints."""
from typing import Any, Optional

from flask import request


def get_json_object() -> Optional[dict[str, Any]]:
    """
    Return the request body as a dict, or None if it is missing,
    malformed, or not a JSON object.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return None
    return data
