"""
Blueprint package — the JSON routing layer.

Routes parse the request, call one service function and serialize the
returned snapshots.  Failures raised by services propagate to the
application-level error handlers registered in ``create_app()``.
"""

from flask import jsonify, request


def json_body():
    """Return the decoded JSON body, or None when it is absent or malformed."""
    return request.get_json(silent=True)


def param(name: str, type=None):
    """
    Read a parameter from the query string, falling back to the JSON
    body, so ``?status=DONE`` and ``{"status": "DONE"}`` are equivalent.
    """
    if name in request.args:
        return request.args.get(name, type=type)
    body = json_body()
    if isinstance(body, dict):
        return body.get(name)
    return None


def render(result, status: int = 200):
    """Serialize one snapshot or a list of snapshots."""
    if isinstance(result, list):
        return jsonify([item.to_dict() for item in result]), status
    return jsonify(result.to_dict()), status
