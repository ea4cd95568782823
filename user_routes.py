"""
User API Routes

Profile read/update for the authenticated caller plus the user listing and
admin delete endpoints.
"""

import logging
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from db import get_db
from dependencies import AuthIdentity, require_auth
from models.schemas_user import UserOut, UserUpdate
from utils.crud_user import get_user_by_id, list_users, delete_user
from utils.errors import AppError, ValidationError, NotFoundError, InternalError
from utils.responses import success

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", summary="List users")
def get_users(db: Session = Depends(get_db)):
    try:
        users = [UserOut.model_validate(u).to_json() for u in list_users(db)]
        return success(data={"users": users}, results=len(users))
    except AppError:
        raise
    except Exception:
        logger.exception("Get users error")
        raise InternalError("An error occurred while fetching users")


# /me must be registered before /{user_id}
@router.get("/me", summary="Current user")
def get_current_user(current: AuthIdentity = Depends(require_auth), db: Session = Depends(get_db)):
    try:
        user = get_user_by_id(db, current.user_id)
        if not user:
            raise NotFoundError("User not found")
        return success(data={"user": UserOut.model_validate(user).to_json()})
    except AppError:
        raise
    except Exception:
        logger.exception("Get current user error")
        raise InternalError("An error occurred while fetching user profile")


@router.put("/me", summary="Update current user (name and school only)")
def update_current_user(payload: UserUpdate, current: AuthIdentity = Depends(require_auth), db: Session = Depends(get_db)):
    try:
        updates = {
            k: v.strip()
            for k, v in {"full_name": payload.full_name, "school_name": payload.school_name}.items()
            if v and v.strip()
        }
        if not updates:
            raise ValidationError("At least one field is required to update")

        user = get_user_by_id(db, current.user_id)
        if not user:
            raise NotFoundError("User not found")
        for field, value in updates.items():
            setattr(user, field, value)
        db.commit()
        db.refresh(user)

        return success("User profile updated successfully", data={"user": UserOut.model_validate(user).to_json()})
    except AppError:
        raise
    except Exception:
        logger.exception("Update current user error")
        raise InternalError("An error occurred while updating user profile")


@router.get("/{user_id}", summary="User by id")
def get_user(user_id: str, db: Session = Depends(get_db)):
    try:
        user = get_user_by_id(db, user_id)
        if not user:
            raise NotFoundError(f"User with ID {user_id} not found")
        return success(data={"user": UserOut.model_validate(user).to_json()})
    except AppError:
        raise
    except Exception:
        logger.exception("Get user by ID error")
        raise InternalError("An error occurred while fetching the user")


@router.delete("/{user_id}", status_code=204, summary="Delete a user (admin)")
def remove_user(user_id: str, current: AuthIdentity = Depends(require_auth), db: Session = Depends(get_db)):
    try:
        user = get_user_by_id(db, user_id)
        if not user:
            raise NotFoundError(f"User with ID {user_id} not found")
        delete_user(db, user)
        db.commit()
        logger.info("User %s deleted by %s", user_id, current.user_id)
        return Response(status_code=204)
    except AppError:
        raise
    except Exception:
        logger.exception("Delete user error")
        raise InternalError("An error occurred while deleting the user")
