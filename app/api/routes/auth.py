import logging
from datetime import datetime
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.db.get_db import get_db
from app.models.user import User
from app.models.enums import AppRole
from app.core.exceptions import DuplicateEmail, InvalidCredentials
from app.schemas.auth import ChangePasswordRequest, LoginRequest, RegisterRequest
from app.utils.helpers import hash_password, integrity_error_kind, success_response, user_to_dict
from app.utils.auth import create_access_token, get_current_user, get_user_by_email, verify_password

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login")
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = get_user_by_email(db, payload.email)

    # Same error for unknown email and wrong password
    if not user or not verify_password(payload.password, user.hashed_password):
        raise InvalidCredentials()

    token = create_access_token(user)
    logger.info("User %s logged in", user.id)

    return success_response(
        message="Login successful",
        token=token,
        user=user_to_dict(user)
    )


@router.post("/register")
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    if get_user_by_email(db, payload.email):
        raise DuplicateEmail()

    now = datetime.utcnow()
    user = User(
        name=payload.name,
        email=payload.email,
        hashed_password=hash_password(payload.password),
        address=payload.address,
        role=AppRole.user,
        created_at=now,
        updated_at=now
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        # Lost a race with a concurrent registration for the same email
        db.rollback()
        if integrity_error_kind(exc) == "unique":
            raise DuplicateEmail()
        raise
    db.refresh(user)

    logger.info("Registered user %s", user.id)
    return JSONResponse(
        status_code=201,
        content=success_response(
            message="Registration successful",
            token=create_access_token(user),
            user=user_to_dict(user)
        )
    )


@router.get("/profile")
def profile(current_user: User = Depends(get_current_user)):
    return success_response(user=user_to_dict(current_user))


@router.put("/change-password")
def change_password(
    payload: ChangePasswordRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    if not verify_password(payload.current_password, current_user.hashed_password):
        raise InvalidCredentials("Current password is incorrect")

    current_user.hashed_password = hash_password(payload.new_password)
    current_user.updated_at = datetime.utcnow()
    db.commit()

    logger.info("User %s changed password", current_user.id)
    return success_response(message="Password updated successfully")
