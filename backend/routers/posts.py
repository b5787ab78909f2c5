from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from database import get_db
from models import User
from post_service import (
    add_comment,
    create_post,
    delete_post,
    get_post,
    list_college_posts,
    list_post_comments,
    toggle_post_like,
    update_post,
)
from schemas import (
    POST_CATEGORY_VALUES,
    CommentCreateRequest,
    CommentResponse,
    FeedPostResponse,
    LikeToggleResponse,
    MessageResponse,
    PostCreateRequest,
    PostResponse,
    PostUpdateRequest,
)
from security import require_college_member, require_user

router = APIRouter()


def _normalize_category(category: Optional[str]) -> Optional[str]:
    value = (category or "").strip().lower()
    if not value or value == "all":
        return None
    if value not in POST_CATEGORY_VALUES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid category")
    return value


def _get_post_or_404(db: Session, post_id: int):
    post = get_post(db, post_id)
    if not post:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return post


@router.get("/posts", response_model=List[FeedPostResponse])
def get_feed(
    category: Optional[str] = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    user: User = Depends(require_college_member),
    db: Session = Depends(get_db),
):
    offset = (page - 1) * limit
    return list_college_posts(
        db,
        user.college_id,
        limit=limit,
        offset=offset,
        viewer_id=user.id,
        category=_normalize_category(category),
    )


@router.post("/posts", response_model=PostResponse)
def create_feed_post(
    payload: PostCreateRequest,
    user: User = Depends(require_college_member),
    db: Session = Depends(get_db),
):
    return create_post(db, user, payload)


@router.put("/posts/{post_id}", response_model=PostResponse)
def edit_post(
    post_id: int,
    payload: PostUpdateRequest,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    post = update_post(db, post_id, user.id, payload.model_dump(exclude_unset=True))
    if not post:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found or unauthorized")
    return post


@router.delete("/posts/{post_id}", response_model=MessageResponse)
def remove_post(
    post_id: int,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    if not delete_post(db, post_id, user.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found or unauthorized")
    return MessageResponse(message="Post deleted successfully")


@router.post("/posts/{post_id}/like", response_model=LikeToggleResponse)
def toggle_like(
    post_id: int,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    _get_post_or_404(db, post_id)
    return LikeToggleResponse(is_liked=toggle_post_like(db, post_id, user.id))


@router.post("/posts/{post_id}/comments", response_model=List[CommentResponse])
def create_comment(
    post_id: int,
    payload: CommentCreateRequest,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    _get_post_or_404(db, post_id)
    add_comment(db, post_id, user.id, payload.content)
    return list_post_comments(db, post_id)


@router.get("/posts/{post_id}/comments", response_model=List[CommentResponse])
def get_comments(post_id: int, db: Session = Depends(get_db)):
    _get_post_or_404(db, post_id)
    return list_post_comments(db, post_id)
