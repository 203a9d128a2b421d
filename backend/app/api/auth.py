"""HTTP Basic authentication gate.

Active only when both AUTH_USERNAME and AUTH_PASSWORD are configured.
The health check stays open for load balancers.
"""

import hmac

from flask import Blueprint, Response, current_app, request

bp = Blueprint("auth", __name__)

REALM = 'Basic realm="Sprint Breakdown"'
OPEN_PATHS = {"/health"}


def _challenge(message):
    return Response(message, status=401, headers={"WWW-Authenticate": REALM})


def _matches(given, expected):
    return hmac.compare_digest((given or "").encode(), expected.encode())


@bp.before_app_request
def require_basic_auth():
    """Reject requests without valid credentials when auth is configured."""
    config = current_app.config["DASHBOARD_CONFIG"]

    if not config.auth_enabled or request.path in OPEN_PATHS or request.method == "OPTIONS":
        return None

    auth = request.authorization
    if auth is None or auth.type != "basic":
        return _challenge("Authentication required")

    if _matches(auth.username, config.auth_username) and _matches(auth.password, config.auth_password):
        return None

    return _challenge("Invalid credentials")
