"""
Save vault: one cloud save per player, replaced wholesale on upload.

The client owns version semantics; uploads are last-writer-wins.
"""

import logging
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Integer, bindparam, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from errors import StorageError

logger = logging.getLogger(__name__)


def put(db: Session, player_id: str, save_data: Any, version: int) -> None:
    stmt = text(
        """
        INSERT INTO cloud_saves (player_id, save_data, version)
        VALUES (:pid, :save_data, :version)
        ON CONFLICT (player_id) DO UPDATE SET
            save_data = excluded.save_data,
            version = excluded.version,
            updated_at = CURRENT_TIMESTAMP
        """
    ).bindparams(bindparam("save_data", type_=JSON))

    try:
        db.execute(stmt, {"pid": player_id, "save_data": save_data, "version": version})
        db.commit()
    except (SQLAlchemyError, OverflowError) as exc:
        db.rollback()
        logger.error("save upload failed for %s: %s", player_id, exc)
        raise StorageError() from exc

    logger.info("Cloud save v%d stored for %s", version, player_id)


def get(db: Session, player_id: str) -> Optional[tuple[Any, int, Any]]:
    """Return (save_data, version, updated_at) or None when nothing is stored."""
    stmt = text(
        "SELECT save_data, version, updated_at FROM cloud_saves WHERE player_id = :pid"
    ).columns(save_data=JSON, version=Integer, updated_at=DateTime)

    try:
        row = db.execute(stmt, {"pid": player_id}).fetchone()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("save download failed for %s: %s", player_id, exc)
        raise StorageError() from exc

    if row is None:
        return None
    return row.save_data, row.version, row.updated_at
