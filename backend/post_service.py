import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Set

from sqlalchemy import distinct, func
from sqlalchemy.orm import Session

from models import Post, PostComment, PostLike, User
from schemas import (
    CommentResponse,
    FeedPostResponse,
    PostCreateRequest,
    PostResponse,
    UserResponse,
)
from time_utils import now_tz
from utils import dialect_insert

logger = logging.getLogger(__name__)

# Columns that must never be nulled by a partial update.
NON_NULLABLE_POST_FIELDS = {"content", "category"}


def get_post(db: Session, post_id: int) -> Optional[Post]:
    return db.query(Post).filter(Post.id == post_id).first()


def _get_owned_post(db: Session, post_id: int, user_id: str) -> Optional[Post]:
    # Ownership mismatch and a missing row are deliberately indistinguishable to callers.
    return db.query(Post).filter(Post.id == post_id, Post.author_id == user_id).first()


def _liked_post_ids(db: Session, post_ids: Sequence[int], viewer_id: str) -> Set[int]:
    if not post_ids:
        return set()
    return {
        pid
        for (pid,) in (
            db.query(PostLike.post_id)
            .filter(
                PostLike.user_id == viewer_id,
                PostLike.post_id.in_(list(post_ids)),
            )
            .all()
        )
    }


def list_college_posts(
    db: Session,
    college_id: int,
    limit: int = 20,
    offset: int = 0,
    viewer_id: Optional[str] = None,
    category: Optional[str] = None,
) -> List[FeedPostResponse]:
    likes_count = func.count(distinct(PostLike.id)).label("likes_count")
    comments_count = func.count(distinct(PostComment.id)).label("comments_count")

    query = (
        db.query(Post, User, likes_count, comments_count)
        .join(User, Post.author_id == User.id)
        .outerjoin(PostLike, PostLike.post_id == Post.id)
        .outerjoin(PostComment, PostComment.post_id == Post.id)
        .filter(Post.college_id == college_id)
    )
    if category and category != "all":
        query = query.filter(Post.category == category)

    rows = (
        query.group_by(Post.id, User.id)
        .order_by(Post.created_at.desc(), Post.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )

    liked_ids: Set[int] = set()
    if viewer_id:
        liked_ids = _liked_post_ids(db, [post.id for post, _, _, _ in rows], viewer_id)

    return [
        FeedPostResponse(
            **PostResponse.model_validate(post).model_dump(),
            author=UserResponse.model_validate(author),
            likes_count=int(likes or 0),
            comments_count=int(comments or 0),
            is_liked_by_user=(post.id in liked_ids) if viewer_id else None,
        )
        for post, author, likes, comments in rows
    ]


def create_post(db: Session, author: User, payload: PostCreateRequest) -> Post:
    post = Post(
        author_id=author.id,
        college_id=author.college_id,
        title=payload.title,
        content=payload.content,
        category=payload.category.value,
        image_url=payload.image_url,
        location=payload.location,
    )
    db.add(post)
    db.commit()
    db.refresh(post)
    logger.info("User %s created post %s in college %s", author.id, post.id, post.college_id)
    return post


def update_post(db: Session, post_id: int, user_id: str, updates: Dict[str, Any]) -> Optional[Post]:
    post = _get_owned_post(db, post_id, user_id)
    if not post:
        return None

    for field, value in updates.items():
        if value is None and field in NON_NULLABLE_POST_FIELDS:
            continue
        if isinstance(value, Enum):
            value = value.value
        setattr(post, field, value)
    post.updated_at = now_tz()

    db.commit()
    db.refresh(post)
    return post


def delete_post(db: Session, post_id: int, user_id: str) -> bool:
    post = _get_owned_post(db, post_id, user_id)
    if not post:
        return False

    db.query(PostComment).filter(PostComment.post_id == post.id).delete(synchronize_session=False)
    db.query(PostLike).filter(PostLike.post_id == post.id).delete(synchronize_session=False)
    db.delete(post)
    db.commit()
    logger.info("User %s deleted post %s", user_id, post_id)
    return True


def toggle_post_like(db: Session, post_id: int, user_id: str) -> bool:
    """Flip the like state for (post, user) and return True when the post is now liked.

    Each branch is a single statement: a DELETE that reports whether it removed the
    like, otherwise an INSERT that ignores a concurrent duplicate. Two identical
    requests racing each other therefore converge on "liked" rather than flipping twice.
    """
    removed = (
        db.query(PostLike)
        .filter(PostLike.post_id == post_id, PostLike.user_id == user_id)
        .delete(synchronize_session=False)
    )
    if removed:
        db.commit()
        return False

    stmt = (
        dialect_insert(db, PostLike)
        .values(post_id=post_id, user_id=user_id)
        .on_conflict_do_nothing(index_elements=[PostLike.post_id, PostLike.user_id])
    )
    db.execute(stmt)
    db.commit()
    return True


def add_comment(db: Session, post_id: int, author_id: str, content: str) -> None:
    db.add(PostComment(post_id=post_id, author_id=author_id, content=content))
    db.commit()


def list_post_comments(db: Session, post_id: int) -> List[CommentResponse]:
    rows = (
        db.query(PostComment, User)
        .join(User, PostComment.author_id == User.id)
        .filter(PostComment.post_id == post_id)
        .order_by(PostComment.created_at.asc(), PostComment.id.asc())
        .all()
    )
    return [
        CommentResponse(
            id=comment.id,
            content=comment.content,
            created_at=comment.created_at,
            author=UserResponse.model_validate(author),
        )
        for comment, author in rows
    ]
