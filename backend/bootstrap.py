from __future__ import annotations

import logging

from database import engine, get_db
from migrations import (
    ensure_post_columns,
    ensure_tables,
    ensure_unique_pair_indexes,
    ensure_user_profile_columns,
)
from models import SystemConfig
from time_utils import now_tz

logger = logging.getLogger(__name__)

MIGRATION_MARKER_KEY = "migration:alumni_bootstrap:v1"


def has_bootstrap_marker() -> bool:
    db = next(get_db())
    try:
        marker = db.query(SystemConfig).filter(SystemConfig.key == MIGRATION_MARKER_KEY).first()
        return marker is not None
    finally:
        db.close()


def set_bootstrap_marker() -> None:
    db = next(get_db())
    try:
        marker = db.query(SystemConfig).filter(SystemConfig.key == MIGRATION_MARKER_KEY).first()
        value = now_tz().isoformat()
        if marker:
            marker.value = value
        else:
            db.add(SystemConfig(key=MIGRATION_MARKER_KEY, value=value))
        db.commit()
    finally:
        db.close()


def clear_bootstrap_marker() -> bool:
    db = next(get_db())
    try:
        marker = db.query(SystemConfig).filter(SystemConfig.key == MIGRATION_MARKER_KEY).first()
        if not marker:
            return False
        db.delete(marker)
        db.commit()
        return True
    finally:
        db.close()


def run_bootstrap_migrations() -> None:
    ensure_tables(engine)
    ensure_post_columns(engine)
    ensure_user_profile_columns(engine)
    ensure_unique_pair_indexes(engine)
    logger.info("Schema is up to date.")
