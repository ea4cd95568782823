import logging
from dataclasses import dataclass
from fastapi import Header, Request

from utils.auth_utils import ACCESS, decode_token
from utils.email_service import Mailer
from utils.errors import AuthenticationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthIdentity:
    user_id: str
    email: str


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer


def require_auth(authorization: str | None = Header(default=None)) -> AuthIdentity:
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthenticationError("Access denied. No token provided.")
    token = authorization.split(" ", 1)[1].strip()
    result = decode_token(token, ACCESS)
    if not result.ok:
        logger.info("Access token rejected: %s", result.reason)
        raise AuthenticationError("Invalid or expired token")
    return AuthIdentity(user_id=result.claims.user_id, email=result.claims.email)
