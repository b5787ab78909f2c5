#!/usr/bin/env python3
"""Cleanup mock Alumni Connect records and mock S3 objects.

Safety rules:
- Deletes only colleges, posts and events tagged with the MOCKAC_ marker,
  users whose id starts with `mockac-`, and rows that hang off them.
- S3 cleanup is limited to post images uploaded by mock users.
"""

from __future__ import annotations

import argparse
from typing import Dict, List
from pathlib import Path
import sys

from sqlalchemy import or_

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from database import SessionLocal
from models import College, Event, EventAttendee, Post, PostComment, PostLike, User
from utils import POST_IMAGE_PREFIX, S3_BUCKET_NAME, S3_CLIENT

MOCK_MARKER = "MOCKAC_"
MOCK_USER_PREFIX = "mockac-"
MOCK_S3_PREFIX = f"{POST_IMAGE_PREFIX}/{MOCK_USER_PREFIX}"


def _ids(rows) -> List:
    return [row[0] for row in rows]


def cleanup_db(dry_run: bool) -> Dict[str, int]:
    db = SessionLocal()
    counts: Dict[str, int] = {
        "attendees": 0,
        "events": 0,
        "comments": 0,
        "likes": 0,
        "posts": 0,
        "users": 0,
        "colleges": 0,
    }

    try:
        user_ids = _ids(db.query(User.id).filter(User.id.like(f"{MOCK_USER_PREFIX}%")).all())
        college_ids = _ids(db.query(College.id).filter(College.name.like(f"{MOCK_MARKER}%")).all())

        post_filters = [Post.content.like(f"{MOCK_MARKER}%")]
        event_filters = [Event.title.like(f"{MOCK_MARKER}%")]
        if user_ids:
            post_filters.append(Post.author_id.in_(user_ids))
            event_filters.append(Event.organizer_id.in_(user_ids))
        if college_ids:
            post_filters.append(Post.college_id.in_(college_ids))
            event_filters.append(Event.college_id.in_(college_ids))
        post_ids = _ids(db.query(Post.id).filter(or_(*post_filters)).all())
        event_ids = _ids(db.query(Event.id).filter(or_(*event_filters)).all())

        if event_ids:
            counts["attendees"] += db.query(EventAttendee).filter(
                EventAttendee.event_id.in_(event_ids)
            ).delete(synchronize_session=False) or 0
            counts["events"] = db.query(Event).filter(Event.id.in_(event_ids)).delete(synchronize_session=False) or 0

        if post_ids:
            counts["comments"] += db.query(PostComment).filter(PostComment.post_id.in_(post_ids)).delete(synchronize_session=False) or 0
            counts["likes"] += db.query(PostLike).filter(PostLike.post_id.in_(post_ids)).delete(synchronize_session=False) or 0
            counts["posts"] = db.query(Post).filter(Post.id.in_(post_ids)).delete(synchronize_session=False) or 0

        if user_ids:
            # Mock users may have touched real posts and events too.
            counts["attendees"] += db.query(EventAttendee).filter(
                EventAttendee.user_id.in_(user_ids)
            ).delete(synchronize_session=False) or 0
            counts["comments"] += db.query(PostComment).filter(PostComment.author_id.in_(user_ids)).delete(synchronize_session=False) or 0
            counts["likes"] += db.query(PostLike).filter(PostLike.user_id.in_(user_ids)).delete(synchronize_session=False) or 0
            counts["users"] = db.query(User).filter(User.id.in_(user_ids)).delete(synchronize_session=False) or 0

        if college_ids:
            counts["colleges"] = db.query(College).filter(College.id.in_(college_ids)).delete(synchronize_session=False) or 0

        if dry_run:
            db.rollback()
        else:
            db.commit()
        return counts
    finally:
        db.close()


def cleanup_s3(dry_run: bool) -> int:
    if not S3_CLIENT or not S3_BUCKET_NAME:
        return 0

    deleted = 0
    continuation = None
    while True:
        kwargs = {"Bucket": S3_BUCKET_NAME, "Prefix": MOCK_S3_PREFIX}
        if continuation:
            kwargs["ContinuationToken"] = continuation
        response = S3_CLIENT.list_objects_v2(**kwargs)
        items = response.get("Contents") or []
        if not items:
            break

        keys = [{"Key": item["Key"]} for item in items]
        deleted += len(keys)
        if not dry_run:
            S3_CLIENT.delete_objects(Bucket=S3_BUCKET_NAME, Delete={"Objects": keys})

        if response.get("IsTruncated"):
            continuation = response.get("NextContinuationToken")
        else:
            break

    return deleted


def main() -> int:
    parser = argparse.ArgumentParser(description="Cleanup Alumni Connect MOCKAC_ data")
    parser.add_argument("--dry-run", action="store_true", help="Print potential deletions without committing")
    args = parser.parse_args()

    counts = cleanup_db(dry_run=args.dry_run)
    s3_deleted = cleanup_s3(dry_run=args.dry_run)

    print("Alumni Connect mock cleanup summary")
    for key, value in counts.items():
        print(f"- {key}: {value}")
    print(f"- s3_objects: {s3_deleted}")
    print(f"- mode: {'dry-run' if args.dry_run else 'apply'}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
