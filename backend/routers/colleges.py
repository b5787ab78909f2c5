from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from database import get_db
from member_service import create_college, get_college, get_college_stats, list_colleges
from models import User
from schemas import CollegeCreate, CollegeResponse, CollegeStatsResponse
from security import require_user

router = APIRouter()


@router.get("/colleges", response_model=List[CollegeResponse])
def get_colleges(db: Session = Depends(get_db)):
    return list_colleges(db)


@router.post("/colleges", response_model=CollegeResponse)
def add_college(
    payload: CollegeCreate,
    _: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    return create_college(db, payload.name, payload.domain)


@router.get("/colleges/{college_id}/stats", response_model=CollegeStatsResponse)
def college_stats(
    college_id: int,
    _: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    if not get_college(db, college_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="College not found")
    return get_college_stats(db, college_id)
