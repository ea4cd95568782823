import bcrypt, jwt, secrets, uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import config

ACCESS = "access"
REFRESH = "refresh"

_SECRETS = {
    ACCESS: config.JWT_ACCESS_SECRET,
    REFRESH: config.JWT_REFRESH_SECRET,
}


def hash_password(raw: str) -> str:
    return bcrypt.hashpw(raw.encode(), bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)).decode()

def verify_password(raw: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(raw.encode(), hashed.encode())
    except Exception:
        return False


def generate_verification_code() -> str:
    return str(secrets.randbelow(900000) + 100000)

def generate_reset_token() -> str:
    return secrets.token_hex(32)


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    email: str
    expires_at: datetime


@dataclass(frozen=True)
class TokenResult:
    """Outcome of decoding a token: claims on success, a named reason otherwise."""
    claims: Optional[TokenClaims] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.claims is not None


def _create_token(user_id: str, email: str, token_type: str, expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    to_encode = {
        "userId": user_id,
        "email": email,
        "type": token_type,
        "iat": now,
        "exp": now + expires_delta,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(to_encode, _SECRETS[token_type], algorithm=config.JWT_ALG)

def create_access_token(user_id: str, email: str) -> str:
    return _create_token(user_id, email, ACCESS, timedelta(minutes=config.ACCESS_TOKEN_EXP_MIN))

def create_refresh_token(user_id: str, email: str) -> str:
    return _create_token(user_id, email, REFRESH, timedelta(days=config.REFRESH_TOKEN_EXP_DAYS))


def decode_token(token: str, token_type: str) -> TokenResult:
    """
    Verify signature and expiry against the key of ``token_type``.
    Never raises; failures come back as ``TokenResult(reason=...)``.
    """
    try:
        data = jwt.decode(
            token,
            _SECRETS[token_type],
            algorithms=[config.JWT_ALG],
            options={"require": ["exp", "userId", "email"]},
        )
    except jwt.ExpiredSignatureError:
        return TokenResult(reason="expired")
    except jwt.InvalidSignatureError:
        return TokenResult(reason="invalid_signature")
    except jwt.DecodeError:
        return TokenResult(reason="malformed")
    except jwt.InvalidTokenError:
        return TokenResult(reason="invalid")
    if data.get("type", token_type) != token_type:
        return TokenResult(reason="wrong_type")
    if not isinstance(data["userId"], str) or not isinstance(data["email"], str):
        return TokenResult(reason="invalid")
    return TokenResult(claims=TokenClaims(
        user_id=data["userId"],
        email=data["email"],
        expires_at=datetime.fromtimestamp(data["exp"], tz=timezone.utc),
    ))
