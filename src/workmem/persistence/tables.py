"""SQLAlchemy ORM models for the benchmark fixture.

The fixture is owned by the seed script; these declarations let the
benchmark query be built from typed columns and let `workmem seed --reset`
drop the tables in dependency order.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import Date, ForeignKey, Integer, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class PlayerTable(Base):
    __tablename__ = "players"

    player_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    nationality: Mapped[str | None] = mapped_column(Text)
    age: Mapped[int | None] = mapped_column(Integer)
    position: Mapped[str | None] = mapped_column(Text)


class MatchTable(Base):
    __tablename__ = "matches"

    match_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    match_date: Mapped[date | None] = mapped_column(Date)
    home_team: Mapped[str | None] = mapped_column(Text)
    away_team: Mapped[str | None] = mapped_column(Text)


class PlayerStatTable(Base):
    """Per-match statistics of one player; the fact table of the benchmark."""

    __tablename__ = "player_stats"

    player_stat_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    player_id: Mapped[int | None] = mapped_column(ForeignKey("players.player_id"))
    match_id: Mapped[int | None] = mapped_column(ForeignKey("matches.match_id"))
    goals: Mapped[int | None] = mapped_column(Integer)
    assists: Mapped[int | None] = mapped_column(Integer)
    minutes_played: Mapped[int | None] = mapped_column(Integer)
