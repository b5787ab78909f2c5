import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from auth import decode_identity_token, decode_token, issue_token_pair
from database import get_db
from member_service import (
    get_college,
    get_user,
    update_user_onboarding,
    update_user_profile,
    upsert_user,
    user_values_from_claims,
)
from models import User
from schemas import (
    OnboardingRequest,
    ProfileUpdateRequest,
    RefreshTokenRequest,
    SessionRequest,
    TokenResponse,
    UserResponse,
)
from security import require_user

logger = logging.getLogger(__name__)

router = APIRouter()


def _token_response(user: User) -> TokenResponse:
    return TokenResponse(
        **issue_token_pair(user.id),
        user=UserResponse.model_validate(user),
    )


@router.post("/auth/session", response_model=TokenResponse)
def create_session(payload: SessionRequest, db: Session = Depends(get_db)):
    claims = decode_identity_token(payload.id_token)
    values = user_values_from_claims(claims)
    try:
        user = upsert_user(db, values)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered to another account")
    logger.info("Session established for user %s", user.id)
    return _token_response(user)


@router.post("/auth/refresh", response_model=TokenResponse)
def refresh_session(payload: RefreshTokenRequest, db: Session = Depends(get_db)):
    claims = decode_token(payload.refresh_token)
    if claims.get("type") != "refresh":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token type")
    user = get_user(db, str(claims.get("sub") or ""))
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return _token_response(user)


@router.get("/auth/user", response_model=UserResponse)
def get_auth_user(user: User = Depends(require_user)):
    return user


@router.post("/onboarding", response_model=UserResponse)
def complete_onboarding(
    payload: OnboardingRequest,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    if not get_college(db, payload.college_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="College not found")
    return update_user_onboarding(db, user, payload)


@router.put("/user/profile", response_model=UserResponse)
def edit_profile(
    payload: ProfileUpdateRequest,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    return update_user_profile(db, user, payload.model_dump(exclude_unset=True))
