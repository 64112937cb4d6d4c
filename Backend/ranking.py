"""
Leaderboard ranker.

The scalar score is a fixed linear weighting of the six components. Ranks are
recomputed from the stored components on every call; nothing is cached.
"""

import logging
from typing import Optional

from sqlalchemy import Float, Integer, String, bindparam, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from errors import StorageError
from schemas import LeaderboardEntry
from scores import SCORE_FIELDS, ScoreComponents

logger = logging.getLogger(__name__)

WEIGHTS = {
    "total_money_earned": 1.0,
    "reputation": 500.0,
    "skill_levels_sum": 100,
    "consultants_count": 250,
    "ai_tool_tiers_sum": 150,
    "manual_tasks_completed": 50,
}

SCORE_EXPR = "(" + " + ".join(f"sc.{name} * {weight!r}" for name, weight in WEIGHTS.items()) + ")"

# Player id breaks ties so top() and rank_of() always agree
_RANKED = f"""
    SELECT
        sc.player_id,
        p.display_name,
        ROW_NUMBER() OVER (ORDER BY {SCORE_EXPR} DESC, p.id) AS rank,
        CAST({SCORE_EXPR} AS FLOAT) AS score,
        {", ".join(f"sc.{name}" for name in SCORE_FIELDS)}
    FROM score_components sc
    JOIN players p ON p.id = sc.player_id
    WHERE p.show_on_leaderboard = :visible
"""


def compute_score(components: ScoreComponents) -> float:
    return float(sum(getattr(components, name) * weight for name, weight in WEIGHTS.items()))


def top(db: Session, limit: int) -> list[LeaderboardEntry]:
    """Return the ``limit`` best visible players, best first."""
    stmt = text(
        f"""
        WITH ranked AS ({_RANKED})
        SELECT * FROM ranked
        ORDER BY rank
        LIMIT :limit
        """
    ).bindparams(bindparam("visible", value=True), bindparam("limit", value=limit))

    try:
        rows = db.execute(stmt).fetchall()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("leaderboard query failed: %s", exc)
        raise StorageError() from exc

    return [
        LeaderboardEntry(
            rank=r.rank,
            display_name=r.display_name,
            score=r.score,
            **{name: getattr(r, name) for name in SCORE_FIELDS},
        )
        for r in rows
    ]


def rank_of(db: Session, player_id: str) -> Optional[tuple[int, float]]:
    """Rank and score of one player, or None if hidden or unscored."""
    stmt = (
        text(
            f"""
            WITH ranked AS ({_RANKED})
            SELECT rank, score FROM ranked
            WHERE player_id = :pid
            """
        )
        .bindparams(bindparam("visible", value=True), bindparam("pid", value=player_id, type_=String))
        .columns(rank=Integer, score=Float)
    )

    try:
        row = db.execute(stmt).fetchone()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("rank query failed for %s: %s", player_id, exc)
        raise StorageError() from exc

    if row is None:
        return None
    return row.rank, row.score
