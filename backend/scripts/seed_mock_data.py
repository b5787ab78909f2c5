#!/usr/bin/env python3
"""Seed cleanup-safe Alumni Connect mock data.

All records created by this script are cleanup-compatible:
- College names, post contents and event titles start with the `MOCKAC_` marker.
- User ids start with `mockac-`.

Cleanup command:
    python backend/scripts/cleanup_mock_data.py
"""

from __future__ import annotations

import argparse
from datetime import timedelta
from pathlib import Path
import sys
from typing import Dict, List

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from database import SessionLocal
from models import (
    AttendanceStatus,
    College,
    Event,
    EventAttendee,
    Post,
    PostCategory,
    PostComment,
    PostLike,
    User,
    UserRole,
)
from time_utils import now_tz

MOCK_MARKER = "MOCKAC_"
MOCK_USER_PREFIX = "mockac-"

DEPARTMENTS = ["Computer Science", "Mechanical", "Electronics", "Civil"]
FIRST_NAMES = ["Asha", "Ravi", "Meera", "Karthik", "Nila", "Arun", "Divya", "Suresh"]


def seed_mock_data(*, users: int, posts: int, events: int) -> Dict[str, int]:
    db = SessionLocal()
    counts = {
        "colleges": 0,
        "users": 0,
        "posts": 0,
        "likes": 0,
        "comments": 0,
        "events": 0,
        "attendees": 0,
    }
    now = now_tz()
    stamp = now.strftime("%Y%m%d%H%M%S")
    categories = [item.value for item in PostCategory]
    statuses = [item.value for item in AttendanceStatus]

    try:
        college = College(name=f"{MOCK_MARKER}College_{stamp}", domain=f"mock{stamp[-6:]}.edu")
        db.add(college)
        db.flush()
        counts["colleges"] += 1

        members: List[User] = []
        for idx in range(users):
            role = UserRole.ALUMNI if idx % 2 else UserRole.STUDENT
            first_name = FIRST_NAMES[idx % len(FIRST_NAMES)]
            member = User(
                id=f"{MOCK_USER_PREFIX}{stamp}-{idx + 1}",
                email=f"{first_name.lower()}.{stamp}.{idx + 1}@{college.domain}",
                first_name=first_name,
                last_name=f"Mock{idx + 1}",
                college_id=college.id,
                role=role.value,
                department=DEPARTMENTS[idx % len(DEPARTMENTS)],
                batch=str(2015 + (idx % 10)),
                is_onboarded=True,
            )
            db.add(member)
            members.append(member)
            counts["users"] += 1
        db.flush()

        for idx in range(posts):
            author = members[idx % len(members)]
            post = Post(
                author_id=author.id,
                college_id=college.id,
                title=f"Mock post {idx + 1}",
                content=f"{MOCK_MARKER}post_{idx + 1} from {author.first_name}",
                category=categories[idx % len(categories)],
                created_at=now - timedelta(hours=idx),
            )
            db.add(post)
            db.flush()
            counts["posts"] += 1

            for liker in members[: (idx % len(members)) + 1]:
                db.add(PostLike(post_id=post.id, user_id=liker.id))
                counts["likes"] += 1

            commenter = members[(idx + 1) % len(members)]
            db.add(
                PostComment(
                    post_id=post.id,
                    author_id=commenter.id,
                    content=f"{MOCK_MARKER}comment_{post.id}",
                )
            )
            counts["comments"] += 1

        for idx in range(events):
            organizer = members[idx % len(members)]
            start = now + timedelta(days=idx + 1)
            event = Event(
                title=f"{MOCK_MARKER}Event_{idx + 1}",
                description="Generated event for Alumni Connect testing",
                start_date=start,
                end_date=start + timedelta(hours=2),
                location="Main Auditorium" if idx % 2 == 0 else None,
                is_virtual=idx % 2 == 1,
                meeting_link="https://meet.example.com/mock" if idx % 2 == 1 else None,
                max_attendees=50,
                organizer_id=organizer.id,
                college_id=college.id,
            )
            db.add(event)
            db.flush()
            counts["events"] += 1

            for offset, attendee in enumerate(members):
                if attendee.id == organizer.id:
                    continue
                db.add(
                    EventAttendee(
                        event_id=event.id,
                        user_id=attendee.id,
                        status=statuses[(idx + offset) % len(statuses)],
                    )
                )
                counts["attendees"] += 1

        db.commit()
        return counts
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed Alumni Connect cleanup-safe mock data")
    parser.add_argument("--users", type=int, default=6, help="Number of mock members to create")
    parser.add_argument("--posts", type=int, default=12, help="Number of mock posts")
    parser.add_argument("--events", type=int, default=4, help="Number of mock events")
    args = parser.parse_args()

    counts = seed_mock_data(
        users=max(2, min(100, args.users)),
        posts=max(0, min(5000, args.posts)),
        events=max(0, min(500, args.events)),
    )
    print("Alumni Connect mock seed summary")
    for key, value in counts.items():
        print(f"- {key}: {value}")
    print("Cleanup with: python backend/scripts/cleanup_mock_data.py")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
