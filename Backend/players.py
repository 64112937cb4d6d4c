"""
Credential store: player identities, recovery passphrases and logins.

Every function takes the request's SQLAlchemy session and commits its own
unit of work. Storage failures roll back and surface as StorageError.
"""

import logging
import secrets
import uuid
from typing import Optional

from sqlalchemy import text
from sqlalchemy.engine import Row
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from errors import Conflict, NotFound, StorageError

logger = logging.getLogger(__name__)

ADJECTIVES = [
    "BRAVE", "CALM", "DARK", "FAST", "GOLD", "HAPPY", "ICY", "KEEN", "LOUD", "MILD",
    "NEAT", "ODD", "PINK", "QUICK", "RED", "SAFE", "TALL", "VAST", "WARM", "ZESTY",
]

NOUNS = [
    "BEAR", "CAT", "DEER", "ELK", "FOX", "GOAT", "HAWK", "IBIS", "JAY", "KITE",
    "LION", "MOON", "NEWT", "OWL", "PIKE", "QUAIL", "ROSE", "STAR", "TOAD", "WOLF",
]

MAX_PASSPHRASE_ATTEMPTS = 10

_PLAYER_COLUMNS = """
    id, display_name, passphrase, username, password_hash,
    show_on_leaderboard, created_at, updated_at
"""


def generate_passphrase() -> str:
    """Draw an ``ADJECTIVE-NOUN-NN`` recovery passphrase."""
    adjective = secrets.choice(ADJECTIVES)
    noun = secrets.choice(NOUNS)
    number = 10 + secrets.randbelow(90)
    return f"{adjective}-{noun}-{number}"


def _unused_passphrase(db: Session) -> str:
    for _ in range(MAX_PASSPHRASE_ATTEMPTS):
        passphrase = generate_passphrase()
        taken = db.execute(
            text("SELECT 1 FROM players WHERE passphrase = :passphrase"),
            {"passphrase": passphrase},
        ).fetchone()
        if not taken:
            return passphrase
    raise StorageError("Could not allocate a recovery passphrase")


def create_player(db: Session, display_name: str) -> tuple[str, str]:
    """
    Create an anonymous player and its zeroed score row.

    Both inserts share one transaction: either the player exists with a
    score row, or nothing was written.

    Returns (player_id, passphrase).
    """
    player_id = str(uuid.uuid4())
    try:
        passphrase = _unused_passphrase(db)

        db.execute(
            text(
                "INSERT INTO players (id, display_name, passphrase) "
                "VALUES (:pid, :name, :passphrase)"
            ),
            {"pid": player_id, "name": display_name, "passphrase": passphrase},
        )
        db.execute(
            text("INSERT INTO score_components (player_id) VALUES (:pid)"),
            {"pid": player_id},
        )
        db.commit()
    except StorageError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("create_player failed: %s", exc)
        raise StorageError() from exc

    logger.info("Player %s created", player_id)
    return player_id, passphrase


def _find_one(db: Session, where: str, params: dict) -> Optional[Row]:
    try:
        return db.execute(
            text(f"SELECT {_PLAYER_COLUMNS} FROM players WHERE {where}"),
            params,
        ).fetchone()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("player lookup failed: %s", exc)
        raise StorageError() from exc


def find_by_passphrase(db: Session, passphrase: str) -> Optional[Row]:
    return _find_one(db, "passphrase = :passphrase", {"passphrase": passphrase})


def find_by_username(db: Session, username: str) -> Optional[Row]:
    return _find_one(db, "username = :username", {"username": username})


def find_by_id(db: Session, player_id: str) -> Optional[Row]:
    return _find_one(db, "id = :pid", {"pid": player_id})


def update_profile(
    db: Session,
    player_id: str,
    display_name: Optional[str] = None,
    show_on_leaderboard: Optional[bool] = None,
) -> None:
    """Replace each provided field; fields left as ``None`` keep their value."""
    try:
        result = db.execute(
            text(
                """
                UPDATE players
                SET display_name = COALESCE(:name, display_name),
                    show_on_leaderboard = COALESCE(:visible, show_on_leaderboard),
                    updated_at = CURRENT_TIMESTAMP
                WHERE id = :pid
                """
            ),
            {"pid": player_id, "name": display_name, "visible": show_on_leaderboard},
        )
        if result.rowcount == 0:
            db.rollback()
            raise NotFound("Player not found")
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("update_profile failed: %s", exc)
        raise StorageError() from exc


def upgrade_credentials(db: Session, player_id: str, username: str, password_hash: str) -> None:
    """
    Attach a username and password hash to an existing player.

    Callers check availability first; the unique constraint still decides
    when two upgrades race for the same name, and the loser gets Conflict.
    """
    try:
        result = db.execute(
            text(
                """
                UPDATE players
                SET username = :username,
                    password_hash = :password_hash,
                    updated_at = CURRENT_TIMESTAMP
                WHERE id = :pid
                """
            ),
            {"pid": player_id, "username": username, "password_hash": password_hash},
        )
        if result.rowcount == 0:
            db.rollback()
            raise NotFound("Player not found")
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.info("Username %r already taken", username)
        raise Conflict("Username already taken") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("upgrade_credentials failed: %s", exc)
        raise StorageError() from exc

    logger.info("Player %s registered username %r", player_id, username)
