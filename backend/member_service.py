import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from models import College, Post, User, UserRole
from schemas import CollegeStatsResponse, OnboardingRequest
from time_utils import now_tz
from utils import dialect_insert

logger = logging.getLogger(__name__)

IDENTITY_CLAIM_FIELDS = {
    "email": "email",
    "first_name": "first_name",
    "last_name": "last_name",
    "profile_image_url": "profile_image_url",
}


def get_user(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def user_values_from_claims(claims: Dict[str, Any]) -> Dict[str, Any]:
    values: Dict[str, Any] = {"id": str(claims["sub"]).strip()}
    for claim, column in IDENTITY_CLAIM_FIELDS.items():
        if claim not in claims:
            continue
        raw = claims.get(claim)
        values[column] = (str(raw).strip() or None) if raw is not None else None
    if values.get("email"):
        values["email"] = values["email"].lower()
    return values


def upsert_user(db: Session, values: Dict[str, Any]) -> User:
    """Insert the user or refresh its identity fields; onboarding data is left untouched."""
    stmt = dialect_insert(db, User).values(**values)
    update_values = {key: stmt.excluded[key] for key in values if key != "id"}
    update_values["updated_at"] = now_tz()
    stmt = stmt.on_conflict_do_update(index_elements=[User.id], set_=update_values)
    db.execute(stmt)
    db.commit()
    return get_user(db, values["id"])


def update_user_onboarding(db: Session, user: User, data: OnboardingRequest) -> User:
    user.college_id = data.college_id
    user.role = data.role.value
    user.department = data.department
    user.batch = data.batch
    user.is_onboarded = True
    user.updated_at = now_tz()
    db.commit()
    db.refresh(user)
    logger.info("User %s onboarded to college %s as %s", user.id, user.college_id, user.role)
    return user


def update_user_profile(db: Session, user: User, updates: Dict[str, Any]) -> User:
    for field, value in updates.items():
        setattr(user, field, value)
    user.updated_at = now_tz()
    db.commit()
    db.refresh(user)
    return user


def list_colleges(db: Session) -> List[College]:
    return db.query(College).order_by(College.id.asc()).all()


def get_college(db: Session, college_id: int) -> Optional[College]:
    return db.query(College).filter(College.id == college_id).first()


def create_college(db: Session, name: str, domain: Optional[str] = None) -> College:
    college = College(name=name, domain=domain)
    db.add(college)
    db.commit()
    db.refresh(college)
    logger.info("Created college %s (%s)", college.id, college.name)
    return college


def get_college_stats(db: Session, college_id: int) -> CollegeStatsResponse:
    total_posts = (
        select(func.count(Post.id))
        .where(Post.college_id == college_id)
        .scalar_subquery()
    )
    row = (
        db.query(
            func.count(case((User.role == UserRole.STUDENT.value, 1))).label("students_count"),
            func.count(case((User.role == UserRole.ALUMNI.value, 1))).label("alumni_count"),
            total_posts.label("total_posts"),
        )
        .filter(User.college_id == college_id)
        .one()
    )
    return CollegeStatsResponse(
        students_count=int(row.students_count or 0),
        alumni_count=int(row.alumni_count or 0),
        total_posts=int(row.total_posts or 0),
    )
