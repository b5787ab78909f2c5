from fastapi import Depends, HTTPException, status

from auth import get_current_user
from models import User


def require_user(user: User = Depends(get_current_user)) -> User:
    return user


def require_college_member(user: User = Depends(get_current_user)) -> User:
    if not user.college_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User not associated with a college")
    return user
