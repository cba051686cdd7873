import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, status, Depends, Header

from app.models.user import UserCreate, UserLogin, UserInDB, UserProfileUpdate, UserPublic
from app.core.security import get_password_hash, verify_password, create_access_token, decode_access_token
from app.db import dynamo

router = APIRouter()
logger = logging.getLogger(__name__)


def get_current_user_id(authorization: Optional[str] = Header(None)) -> str:
    """Extract user_id from JWT token"""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token required")

    token = authorization.replace("Bearer ", "", 1)
    payload = decode_access_token(token)
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return user_id


def to_public(user: dict) -> UserPublic:
    """Stored user item -> public profile, without the password hash."""
    return UserPublic(**{k: v for k, v in user.items() if k != "password_hash"})


@router.post("/register", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
def register(user: UserCreate):
    if dynamo.get_user_by_email(user.email):
        raise HTTPException(status_code=400, detail="User already exists")

    user_db = UserInDB(
        email=user.email,
        password_hash=get_password_hash(user.password),
        full_name=user.full_name,
    )
    if not dynamo.put_user(user_db.model_dump()):
        raise HTTPException(status_code=500, detail="Error saving user")

    logger.info(f"Registered user {user_db.user_id}")
    return to_public(user_db.model_dump())


@router.post("/login")
def login(login_data: UserLogin):
    try:
        logger.info(f"Login attempt for email: {login_data.email}")
        user = dynamo.get_user_by_email(login_data.email)

        if not user or not verify_password(login_data.password, user["password_hash"]):
            logger.warning(f"Rejected login for: {login_data.email}")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

        access_token = create_access_token(data={"sub": user["user_id"]})
        return {
            "access_token": access_token,
            "token_type": "bearer",
            "user": to_public(user).model_dump(),
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Login error: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Login failed")


@router.get("/me", response_model=UserPublic)
def get_profile(user_id: str = Depends(get_current_user_id)):
    user = dynamo.get_user_by_id(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return to_public(user)


@router.put("/me", response_model=UserPublic)
def update_profile(profile: UserProfileUpdate, user_id: str = Depends(get_current_user_id)):
    """Update the caller's profile. Phone numbers are stored formatted, e.g. (555) 123-4567."""
    updates = profile.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    updated = dynamo.update_user(user_id, updates)
    if not updated:
        raise HTTPException(status_code=404, detail="User not found")
    return to_public(updated)
