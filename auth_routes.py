"""
Auth API Routes

Registration, email verification, login, password reset and token refresh.
Every handler answers with the success/error envelope; unexpected failures
are logged here and surfaced as a generic 500.
"""

import logging
from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import config
from db import get_db
from dependencies import get_mailer
from models.schemas_user import (
    UserRegister, UserVerify, UserLogin, ForgotPasswordRequest, ResetPasswordRequest,
    RefreshTokenRequest, UserOut,
)
from utils.auth_utils import (
    REFRESH, hash_password, verify_password, create_access_token, create_refresh_token,
    decode_token, generate_verification_code, generate_reset_token,
)
from utils.crud_user import (
    get_user_by_email, get_user_by_id, create_user, create_email_verification,
    find_active_verification, create_password_reset, find_active_password_reset,
)
from utils.email_service import Mailer
from utils.errors import AppError, ValidationError, ConflictError, AuthenticationError, NotFoundError, InternalError
from utils.responses import success
from utils.validators import PASSWORD_POLICY_MESSAGE, is_valid_email, is_valid_password, normalize_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

FORGOT_PASSWORD_MESSAGE = "If an account with that email exists, a password reset link will be sent"
EMAIL_TAKEN_MESSAGE = "User with this email already exists"


def _notify(send, to_email: str, secret: str) -> None:
    # best effort: a failed delivery never changes the response
    try:
        if not send(to_email, secret):
            logger.warning("Email delivery to %s reported failure", to_email)
    except Exception:
        logger.exception("Email delivery to %s raised", to_email)


def _check_new_password(password: str, confirm_password: str) -> None:
    if password != confirm_password:
        raise ValidationError("Passwords do not match")
    if not is_valid_password(password):
        raise ValidationError(PASSWORD_POLICY_MESSAGE)


# ─────────────────────────────────────────────
# POST /auth/register
# ─────────────────────────────────────────────
@router.post("/register", summary="Register & send verification code")
def register(payload: UserRegister, db: Session = Depends(get_db), mailer: Mailer = Depends(get_mailer)):
    try:
        if not all([payload.full_name, payload.email, payload.school_name, payload.password, payload.confirm_password]):
            raise ValidationError("All fields are required")
        email = normalize_email(payload.email)
        if not is_valid_email(email):
            raise ValidationError("Invalid email format")
        _check_new_password(payload.password, payload.confirm_password)

        if get_user_by_email(db, email):
            raise ConflictError(EMAIL_TAKEN_MESSAGE)
        user = create_user(
            db,
            email=email,
            full_name=payload.full_name.strip(),
            school_name=payload.school_name.strip(),
            password_hash=hash_password(payload.password),
        )
        code = generate_verification_code()
        create_email_verification(db, user, code, config.VERIFICATION_CODE_EXP_MIN)
        db.flush()
        user_id = user.id
        db.commit()

        _notify(mailer.send_verification_email, email, code)
        logger.info("Registered user %s", user_id)
        return success(
            "User registered successfully. Please check your email for verification code.",
            data={"userId": user_id, "email": email},
            status_code=201,
        )
    except AppError:
        raise
    except IntegrityError:
        # lost a race against a concurrent registration of the same email
        db.rollback()
        raise ConflictError(EMAIL_TAKEN_MESSAGE)
    except Exception:
        logger.exception("Registration error")
        raise InternalError("An error occurred during registration")


# ─────────────────────────────────────────────
# POST /auth/verify-email
# ─────────────────────────────────────────────
@router.post("/verify-email", summary="Verify email with the emailed code")
def verify_email(payload: UserVerify, db: Session = Depends(get_db)):
    try:
        if not payload.email or not payload.code:
            raise ValidationError("Email and verification code are required")

        user = get_user_by_email(db, normalize_email(payload.email))
        if not user:
            raise NotFoundError("User not found")
        verification = find_active_verification(db, user.id, payload.code.strip())
        if not verification:
            raise ValidationError("Invalid or expired verification code")
        # both flags go out in one commit
        verification.is_used = True
        user.is_verified = True
        db.commit()

        return success("Email verified successfully. You can now log in.")
    except AppError:
        raise
    except Exception:
        logger.exception("Email verification error")
        raise InternalError("An error occurred during email verification")


# ─────────────────────────────────────────────
# POST /auth/login
# ─────────────────────────────────────────────
@router.post("/login", summary="Login (requires verified email)")
def login(payload: UserLogin, db: Session = Depends(get_db)):
    try:
        if not payload.email or not payload.password:
            raise ValidationError("Email and password are required")

        user = get_user_by_email(db, normalize_email(payload.email))
        if not user or not verify_password(payload.password, user.password_hash):
            raise AuthenticationError("Invalid email or password")
        if not user.is_verified:
            raise AuthenticationError("Please verify your email before logging in")
        data = {
            "accessToken": create_access_token(user.id, user.email),
            "refreshToken": create_refresh_token(user.id, user.email),
            "user": UserOut.model_validate(user).to_json(),
        }

        return success("Login successful", data=data)
    except AppError:
        raise
    except Exception:
        logger.exception("Login error")
        raise InternalError("An error occurred during login")


# ─────────────────────────────────────────────
# POST /auth/forgot-password
# ─────────────────────────────────────────────
@router.post("/forgot-password", summary="Request a password reset link")
def forgot_password(payload: ForgotPasswordRequest, db: Session = Depends(get_db), mailer: Mailer = Depends(get_mailer)):
    try:
        if not payload.email:
            raise ValidationError("Email is required")
        email = normalize_email(payload.email)
        if not is_valid_email(email):
            raise ValidationError("Invalid email format")

        token = None
        user = get_user_by_email(db, email)
        if user:
            token = generate_reset_token()
            create_password_reset(db, user, token, config.RESET_TOKEN_EXP_MIN)
            db.commit()

        # same answer whether or not the account exists
        if token:
            _notify(mailer.send_password_reset_email, email, token)
        return success(FORGOT_PASSWORD_MESSAGE)
    except AppError:
        raise
    except Exception:
        logger.exception("Forgot password error")
        raise InternalError("An error occurred while processing your request")


# ─────────────────────────────────────────────
# POST /auth/reset-password
# ─────────────────────────────────────────────
@router.post("/reset-password", summary="Reset password using the emailed token")
def reset_password(payload: ResetPasswordRequest, db: Session = Depends(get_db)):
    try:
        if not payload.token or not payload.password or not payload.confirm_password:
            raise ValidationError("Token, password, and confirm password are required")
        _check_new_password(payload.password, payload.confirm_password)

        reset = find_active_password_reset(db, payload.token.strip())
        if not reset:
            raise ValidationError("Invalid or expired token")
        reset.user.password_hash = hash_password(payload.password)
        reset.is_used = True
        db.commit()

        return success("Password reset successful. You can now log in with your new password.")
    except AppError:
        raise
    except Exception:
        logger.exception("Reset password error")
        raise InternalError("An error occurred while resetting your password")


# ─────────────────────────────────────────────
# POST /auth/refresh
# ─────────────────────────────────────────────
@router.post("/refresh", summary="Exchange a refresh token for a new access token")
def refresh_token(payload: RefreshTokenRequest, db: Session = Depends(get_db)):
    try:
        if not payload.refresh_token:
            raise ValidationError("Refresh token is required")
        result = decode_token(payload.refresh_token, REFRESH)
        if not result.ok:
            logger.info("Refresh token rejected: %s", result.reason)
            raise AuthenticationError("Invalid or expired refresh token")

        user = get_user_by_id(db, result.claims.user_id)
        if not user:
            raise NotFoundError("User not found")
        access_token = create_access_token(user.id, user.email)

        return success("Access token refreshed successfully", data={"accessToken": access_token})
    except AppError:
        raise
    except Exception:
        logger.exception("Refresh token error")
        raise InternalError("An error occurred while refreshing token")
