from functools import wraps

from flask import abort, current_app, request


def require_api_key(func):
    """Reject the request with 401 unless it carries the configured API key.

    When no API_KEY is configured the endpoint is open, which is the normal
    setup for a widget bound to localhost.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        key = current_app.config.get("API_KEY")
        if key:
            provided = request.headers.get("X-API-KEY") or request.args.get("api_key")
            if provided != key:
                abort(401)
        return func(*args, **kwargs)

    return wrapper
