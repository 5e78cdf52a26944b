from flask import request
from werkzeug.routing import IntegerConverter

from ..errors import InvalidRequest
from ..validation import MAX_INT


class IdConverter(IntegerConverter):
    """
    Positive row id that fits an INTEGER column.

    Registered as <id:...>. Anything outside 1..MAX_INT does not match the
    route, so it is a 404 instead of reaching the database.
    """

    def __init__(self, url_map, *args, **kwargs):
        kwargs.setdefault("min", 1)
        kwargs.setdefault("max", MAX_INT)
        super().__init__(url_map, *args, **kwargs)


def json_body() -> dict:
    """Request JSON object, or {} for an empty body. Anything else is a 400."""
    if not request.data:
        return {}
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidRequest("Request body must be a JSON object")
    return data
