import enum
import hmac
import logging
from fastapi import HTTPException, Request
from config import DASHBOARD_PASSWORD, AUTH_COOKIE_NAME

logger = logging.getLogger(__name__)

# Dashboard gate: a shared password plus a long-lived cookie flag.
# It hides the dashboard UI; it is not access control.
COOKIE_MAX_AGE = 10 * 365 * 24 * 3600
LOGIN_ERROR = "Incorrect password."

class AuthState(enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"

def authenticate(state: AuthState, password: str) -> tuple[AuthState, str]:
    """Apply a password attempt; returns (new_state, inline_error)."""
    if state is AuthState.AUTHENTICATED:
        return state, ""
    if hmac.compare_digest((password or "").encode("utf-8"), DASHBOARD_PASSWORD.encode("utf-8")):
        return AuthState.AUTHENTICATED, ""
    logger.info("Dashboard login rejected")
    return AuthState.UNAUTHENTICATED, LOGIN_ERROR

def auth_state(request: Request) -> AuthState:
    if request.cookies.get(AUTH_COOKIE_NAME) == "true":
        return AuthState.AUTHENTICATED
    return AuthState.UNAUTHENTICATED

def verify_dashboard(request: Request):
    if auth_state(request) is not AuthState.AUTHENTICATED:
        raise HTTPException(status_code=401, detail="Dashboard login required")
