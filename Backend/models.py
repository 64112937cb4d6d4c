"""
SQLAlchemy ORM models for the Game Progress system.
Tables: players, score_components, cloud_saves
"""

from sqlalchemy import (
    Boolean, CheckConstraint, Column, DateTime, Float, ForeignKey, Integer,
    JSON, String, func, true,
)
from sqlalchemy.orm import relationship, declarative_base

Base = declarative_base()


class Player(Base):
    """A player identity with its recovery passphrase and optional login."""

    __tablename__ = "players"
    __table_args__ = (
        CheckConstraint(
            "(username IS NULL AND password_hash IS NULL) "
            "OR (username IS NOT NULL AND password_hash IS NOT NULL)",
            name="ck_players_credentials_pair",
        ),
    )

    id = Column(String(36), primary_key=True)
    display_name = Column(String(64), nullable=False)
    passphrase = Column(String(32), unique=True, nullable=False)
    username = Column(String(32), unique=True, nullable=True)
    password_hash = Column(String(256), nullable=True)
    show_on_leaderboard = Column(Boolean, nullable=False, server_default=true())
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now())

    # Relationships
    scores = relationship("ScoreComponents", back_populates="player", uselist=False, cascade="all, delete-orphan")
    cloud_save = relationship("CloudSave", back_populates="player", uselist=False, cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Player(id={self.id}, display_name='{self.display_name}')>"


class ScoreComponents(Base):
    """Latest known value of each progress component; values only ever grow."""

    __tablename__ = "score_components"
    __table_args__ = (
        CheckConstraint(
            "total_money_earned >= 0 AND reputation >= 0 AND skill_levels_sum >= 0 "
            "AND consultants_count >= 0 AND ai_tool_tiers_sum >= 0 "
            "AND manual_tasks_completed >= 0",
            name="ck_score_components_non_negative",
        ),
    )

    player_id = Column(String(36), ForeignKey("players.id", ondelete="CASCADE"), primary_key=True)
    total_money_earned = Column(Float, nullable=False, server_default="0")
    reputation = Column(Float, nullable=False, server_default="0")
    skill_levels_sum = Column(Integer, nullable=False, server_default="0")
    consultants_count = Column(Integer, nullable=False, server_default="0")
    ai_tool_tiers_sum = Column(Integer, nullable=False, server_default="0")
    manual_tasks_completed = Column(Integer, nullable=False, server_default="0")
    updated_at = Column(DateTime, nullable=False, server_default=func.now())

    # Relationships
    player = relationship("Player", back_populates="scores")

    def __repr__(self):
        return f"<ScoreComponents(player_id={self.player_id})>"


class CloudSave(Base):
    """The single cloud save slot of a player."""

    __tablename__ = "cloud_saves"

    player_id = Column(String(36), ForeignKey("players.id", ondelete="CASCADE"), primary_key=True)
    save_data = Column(JSON, nullable=False)
    version = Column(Integer, nullable=False)
    updated_at = Column(DateTime, nullable=False, server_default=func.now())

    # Relationships
    player = relationship("Player", back_populates="cloud_save")

    def __repr__(self):
        return f"<CloudSave(player_id={self.player_id}, version={self.version})>"
