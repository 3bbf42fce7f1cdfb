#!/usr/bin/env python3
"""
Data models for the Score Bot
Contains shared data structures used across modules
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


@dataclass
class MeshMessage:
    """Simplified message structure for our bot"""
    content: str
    sender_id: Optional[str] = None
    channel: Optional[str] = None
    is_dm: bool = False
    timestamp: Optional[int] = None


class GameStatus(Enum):
    """Lifecycle of a fixture as reported by the provider"""
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    ENDED = "ended"
    POSTPONED = "postponed"
    CANCELLED = "cancelled"


@dataclass
class Game:
    """A single fixture. start_time is always timezone aware."""
    home: str
    away: str
    start_time: datetime
    status: GameStatus = GameStatus.UPCOMING
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    elapsed: Optional[str] = None  # e.g. "67'" or "HT" while ongoing


@dataclass
class Competition:
    name: str
    games: List[Game] = field(default_factory=list)


@dataclass
class Country:
    name: str
    competitions: List[Competition] = field(default_factory=list)


@dataclass
class GameTree:
    """Country -> Competition -> Game hierarchy in provider order"""
    countries: List[Country] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.countries


@dataclass
class GameRow:
    """A game carrying the labels of the country and competition it belongs to"""
    country: str
    competition: str
    game: Game
