"""Pydantic schemas for request bodies and configuration."""

import datetime as dt

from pydantic import BaseModel, Field, field_validator, model_validator

from .constants import (
    BALANCE_TOLERANCE,
    DEFAULT_DB_PATH,
    MATCH_THRESHOLD,
    MAX_SUGGESTIONS,
    RECENT_GAMES_LIMIT,
    SUGGESTION_THRESHOLD,
)


def _strip_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError('Player name is required')
    return v


class PlayerInput(BaseModel):
    """Body for creating or renaming a player."""

    name: str = Field(..., max_length=100)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Trim the name and reject blanks."""
        return _strip_name(v)

    class Config:
        extra = 'forbid'


class GamePlayerInput(BaseModel):
    """A player's amounts in a manually entered game."""

    player_id: str = Field(..., min_length=1)
    buyin: float = Field(..., ge=0, allow_inf_nan=False)
    cashout: float = Field(..., ge=0, allow_inf_nan=False)

    class Config:
        extra = 'forbid'


class GameCreate(BaseModel):
    date: dt.date
    players: list[GamePlayerInput] = Field(..., min_length=1)

    class Config:
        extra = 'forbid'


class GameUpdate(BaseModel):
    date: dt.date | None = None
    is_completed: bool | None = None

    class Config:
        extra = 'forbid'


class GamePlayerAmounts(BaseModel):
    buyin: float = Field(..., ge=0, allow_inf_nan=False)
    cashout: float = Field(..., ge=0, allow_inf_nan=False)

    class Config:
        extra = 'forbid'


class SettlementCreate(BaseModel):
    """Payment from one player to another."""

    from_player_id: str = Field(..., min_length=1)
    to_player_id: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0, allow_inf_nan=False)
    date: dt.date
    notes: str | None = None

    @model_validator(mode='after')
    def validate_players(self):
        """A player cannot pay themselves."""
        if self.from_player_id == self.to_player_id:
            raise ValueError('From and To players must be different')
        return self

    class Config:
        extra = 'forbid'


class SettlementUpdate(BaseModel):
    amount: float | None = Field(None, gt=0, allow_inf_nan=False)
    date: dt.date | None = None
    notes: str | None = None

    class Config:
        extra = 'forbid'


class BulkParseRequest(BaseModel):
    """Pasted results to preview."""

    text: str
    date: dt.date | None = None

    class Config:
        extra = 'forbid'


class BulkPlayerInput(BaseModel):
    """One confirmed row of a bulk import."""

    name: str = Field(..., min_length=1)
    profit: float = Field(..., allow_inf_nan=False)
    player_id: str | None = Field(None, alias='playerId')

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Trim the name and reject blanks."""
        return _strip_name(v)

    class Config:
        extra = 'forbid'
        populate_by_name = True


class BulkCreateRequest(BaseModel):
    """Confirmed bulk import, usually built from a parse preview."""

    date: dt.date
    players: list[BulkPlayerInput] = Field(..., min_length=1)
    create_new_players: bool = Field(True, alias='createNewPlayers')

    class Config:
        extra = 'forbid'
        populate_by_name = True


class LedgerConfig(BaseModel):
    """Ledger configuration settings."""

    database_path: str = Field(DEFAULT_DB_PATH, min_length=1)
    host: str = '127.0.0.1'
    port: int = Field(5001, ge=0, le=65535)
    match_threshold: float = Field(MATCH_THRESHOLD, ge=0, le=1)
    suggestion_threshold: float = Field(SUGGESTION_THRESHOLD, ge=0, le=1)
    max_suggestions: int = Field(MAX_SUGGESTIONS, ge=0, le=20)
    balance_tolerance: float = Field(BALANCE_TOLERANCE, ge=0)
    recent_games_limit: int = Field(RECENT_GAMES_LIMIT, ge=1, le=100)
    seed_demo_data: bool = False
    cors_origin: str = '*'

    @model_validator(mode='after')
    def validate_thresholds(self):
        """Suggestion threshold may not exceed the match threshold."""
        if self.suggestion_threshold > self.match_threshold:
            raise ValueError(
                f'suggestion_threshold ({self.suggestion_threshold}) '
                f'exceeds match_threshold ({self.match_threshold})'
            )
        return self

    class Config:
        extra = 'forbid'
