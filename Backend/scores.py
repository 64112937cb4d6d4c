"""
Score ledger: per-player progress components that never move backwards.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import greatest
from errors import StorageError

logger = logging.getLogger(__name__)

SCORE_FIELDS = (
    "total_money_earned",
    "reputation",
    "skill_levels_sum",
    "consultants_count",
    "ai_tool_tiers_sum",
    "manual_tasks_completed",
)


@dataclass(frozen=True)
class ScoreComponents:
    total_money_earned: float = 0.0
    reputation: float = 0.0
    skill_levels_sum: int = 0
    consultants_count: int = 0
    ai_tool_tiers_sum: int = 0
    manual_tasks_completed: int = 0


def merge(db: Session, player_id: str, submitted: ScoreComponents) -> None:
    """
    Fold a submission into the stored components, field by field.

    Each stored field becomes max(stored, submitted) inside a single
    INSERT ... ON CONFLICT statement, so concurrent submissions for the same
    player cannot overwrite each other's raises.
    """
    fn = greatest(db.get_bind())
    columns = ", ".join(SCORE_FIELDS)
    values = ", ".join(f":{name}" for name in SCORE_FIELDS)
    updates = ",\n".join(
        f"{name} = {fn}(score_components.{name}, excluded.{name})"
        for name in SCORE_FIELDS
    )
    params = {name: max(value, 0) for name, value in asdict(submitted).items()}
    params["pid"] = player_id

    try:
        db.execute(
            text(
                f"""
                INSERT INTO score_components (player_id, {columns})
                VALUES (:pid, {values})
                ON CONFLICT (player_id) DO UPDATE SET
                {updates},
                updated_at = CURRENT_TIMESTAMP
                """
            ),
            params,
        )
        db.commit()
    except (SQLAlchemyError, OverflowError) as exc:
        # The SQLite driver raises OverflowError itself for out-of-range integers
        db.rollback()
        logger.error("score merge failed for %s: %s", player_id, exc)
        raise StorageError() from exc

    logger.debug("Scores merged for %s", player_id)


def get_components(db: Session, player_id: str) -> Optional[ScoreComponents]:
    try:
        row = db.execute(
            text(f"SELECT {', '.join(SCORE_FIELDS)} FROM score_components WHERE player_id = :pid"),
            {"pid": player_id},
        ).fetchone()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("score lookup failed for %s: %s", player_id, exc)
        raise StorageError() from exc

    if row is None:
        return None
    return ScoreComponents(**row._mapping)
