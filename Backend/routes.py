"""
Game Progress API routes.

Endpoints:
  POST  /api/players          — Create an anonymous player
  POST  /api/players/recover  — Recover a player by passphrase
  POST  /api/players/register — Attach username/password (auth)
  POST  /api/players/login    — Log in with username/password
  PATCH /api/players/me       — Update display name / visibility (auth)
  PUT   /api/scores           — Submit score components (auth)
  GET   /api/leaderboard      — Top players + own rank (optional auth)
  PUT   /api/saves            — Upload cloud save (auth)
  GET   /api/saves/me         — Download cloud save (auth)
"""

import logging
from dataclasses import fields
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

import players
import ranking
import saves
import scores
from auth import (
    SessionAuthority,
    get_authority,
    hash_password,
    optional_player,
    require_player,
    verify_password,
)
from config import settings
from database import get_db
from errors import Conflict, NotFound, Unauthenticated
from limiter import ACCOUNT_LIMIT, READ_LIMIT, WRITE_LIMIT, limiter
from schemas import (
    AuthResponse,
    CreatePlayerRequest,
    CreatePlayerResponse,
    CredentialsRequest,
    LeaderboardResponse,
    MessageResponse,
    RecoverRequest,
    SaveDownload,
    SaveUpload,
    ScoreSubmission,
    UpdatePlayerRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


# ── Players ──────────────────────────────────────────────────────

@router.post("/players", response_model=CreatePlayerResponse,
             status_code=status.HTTP_201_CREATED, tags=["Players"])
@limiter.limit(ACCOUNT_LIMIT)
def create_player(
    request: Request,
    payload: CreatePlayerRequest,
    db: Session = Depends(get_db),
    authority: SessionAuthority = Depends(get_authority),
):
    """Create an anonymous player; the passphrase is shown only this once."""
    player_id, passphrase = players.create_player(db, payload.display_name)
    return CreatePlayerResponse(
        id=player_id,
        passphrase=passphrase,
        token=authority.issue(player_id),
    )


@router.post("/players/recover", response_model=AuthResponse, tags=["Players"])
@limiter.limit(ACCOUNT_LIMIT)
def recover_player(
    request: Request,
    payload: RecoverRequest,
    db: Session = Depends(get_db),
    authority: SessionAuthority = Depends(get_authority),
):
    player = players.find_by_passphrase(db, payload.passphrase.strip().upper())
    if player is None:
        raise NotFound("No player with that passphrase")

    logger.info("Player %s recovered by passphrase", player.id)
    return AuthResponse(id=player.id, display_name=player.display_name, token=authority.issue(player.id))


@router.post("/players/register", response_model=MessageResponse, tags=["Players"])
@limiter.limit(ACCOUNT_LIMIT)
def register(
    request: Request,
    payload: CredentialsRequest,
    player_id: str = Depends(require_player),
    db: Session = Depends(get_db),
):
    """Upgrade the caller's anonymous identity with a username and password."""
    existing = players.find_by_username(db, payload.username)
    if existing is not None and existing.id != player_id:
        raise Conflict("Username already taken")

    players.upgrade_credentials(db, player_id, payload.username, hash_password(payload.password))
    return MessageResponse(message="Account registered")


@router.post("/players/login", response_model=AuthResponse, tags=["Players"])
@limiter.limit(ACCOUNT_LIMIT)
def login(
    request: Request,
    payload: CredentialsRequest,
    db: Session = Depends(get_db),
    authority: SessionAuthority = Depends(get_authority),
):
    player = players.find_by_username(db, payload.username)
    # Unknown user and wrong password look the same to the caller
    if player is None or not verify_password(player.password_hash, payload.password):
        logger.warning("Failed login for username %r", payload.username)
        raise Unauthenticated("Invalid username or password")

    return AuthResponse(id=player.id, display_name=player.display_name, token=authority.issue(player.id))


@router.patch("/players/me", response_model=MessageResponse, tags=["Players"])
@limiter.limit(WRITE_LIMIT)
def update_player(
    request: Request,
    payload: UpdatePlayerRequest,
    player_id: str = Depends(require_player),
    db: Session = Depends(get_db),
):
    players.update_profile(
        db,
        player_id,
        display_name=payload.display_name,
        show_on_leaderboard=payload.show_on_leaderboard,
    )
    return MessageResponse(message="Profile updated")


# ── Scores & Leaderboard ─────────────────────────────────────────

@router.put("/scores", response_model=MessageResponse, tags=["Scores"])
@limiter.limit(WRITE_LIMIT)
def submit_scores(
    request: Request,
    payload: ScoreSubmission,
    player_id: str = Depends(require_player),
    db: Session = Depends(get_db),
):
    submitted = scores.ScoreComponents(
        **{f.name: getattr(payload, f.name) for f in fields(scores.ScoreComponents)}
    )
    scores.merge(db, player_id, submitted)
    return MessageResponse(message="Scores submitted")


@router.get("/leaderboard", response_model=LeaderboardResponse, tags=["Leaderboard"])
@limiter.limit(READ_LIMIT)
def get_leaderboard(
    request: Request,
    player_id: Optional[str] = Depends(optional_player),
    db: Session = Depends(get_db),
):
    """Return the top players; authenticated callers also get their own standing."""
    response = LeaderboardResponse(entries=ranking.top(db, settings.LEADERBOARD_SIZE))

    if player_id is not None:
        standing = ranking.rank_of(db, player_id)
        if standing is not None:
            response.player_rank, response.player_score = standing

    return response


# ── Cloud Saves ──────────────────────────────────────────────────

@router.put("/saves", response_model=MessageResponse, tags=["Saves"])
@limiter.limit(WRITE_LIMIT)
def upload_save(
    request: Request,
    payload: SaveUpload,
    player_id: str = Depends(require_player),
    db: Session = Depends(get_db),
):
    saves.put(db, player_id, payload.save_data, payload.version)
    return MessageResponse(message="Save uploaded")


@router.get("/saves/me", response_model=SaveDownload, tags=["Saves"])
@limiter.limit(READ_LIMIT)
def download_save(
    request: Request,
    player_id: str = Depends(require_player),
    db: Session = Depends(get_db),
):
    stored = saves.get(db, player_id)
    if stored is None:
        raise NotFound("No cloud save")

    save_data, version, updated_at = stored
    return SaveDownload(save_data=save_data, version=version, updated_at=updated_at)
