#!/usr/bin/env python3
"""
Ranked table helpers for the Score Bot
Shared by the Elo, league table, fantasy and Strava commands
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, TypeVar


DEFAULT_WINDOW_SIZE = 6

E = TypeVar('E')


def prevent_highlight(name: str) -> str:
    """Insert a zero-width joiner after the first character so chat clients don't ping the user"""
    if len(name) < 2:
        return name
    return name[0] + '\u200d' + name[1:]


@dataclass
class RankedEntry:
    """A row in an ordered ranking"""
    rank: int
    label: str


@dataclass
class EloEntry(RankedEntry):
    """A clubelo.com ranking row"""
    country: str = ""
    level: str = ""
    elo: float = 0.0
    
    def __str__(self) -> str:
        return f"{self.rank}. {self.label} {self.elo:.0f}pts"


@dataclass
class TableEntry(RankedEntry):
    """A league table row"""
    played: int = 0
    win: int = 0
    draw: int = 0
    lose: int = 0
    goals_for: int = 0
    goals_against: int = 0
    goal_difference: int = 0
    points: int = 0
    
    def __str__(self) -> str:
        return (f"{self.rank}. {self.label} {self.points}pts "
                f"({self.played}P {self.win}W {self.draw}D {self.lose}L {self.goals_for}-{self.goals_against})")


@dataclass
class FantasyEntry(RankedEntry):
    """A fantasy league leaderboard row"""
    points: str = ""
    
    def __str__(self) -> str:
        if not self.points:
            return f"{self.rank}. {prevent_highlight(self.label)} no pts"
        return f"{self.rank}. {prevent_highlight(self.label)} {self.points}pts"


@dataclass
class PredictorEntry(RankedEntry):
    """A match predictor leaderboard row"""
    points: int = 0
    matchday_points: int = 0
    
    def __str__(self) -> str:
        return f"{self.rank}. {prevent_highlight(self.label)} {self.points}pts (md: {self.matchday_points})"


def format_duration(seconds: int) -> str:
    """m:ss, or h:mm:ss from one hour up"""
    hours, rest = divmod(int(seconds), 3600)
    minutes, seconds = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02}:{seconds:02}"
    return f"{minutes}:{seconds:02}"


@dataclass
class StravaAthleteEntry(RankedEntry):
    """A Strava club leaderboard row; distances in metres, times in seconds"""
    athlete_id: int = 0
    distance: float = 0.0
    moving_time: int = 0
    elev_gain: float = 0.0
    velocity: float = 0.0
    
    @property
    def slope(self) -> float:
        """Average climb as a percentage of distance"""
        if not self.distance:
            return 0.0
        return self.elev_gain / self.distance * 100
    
    def __str__(self) -> str:
        kilometres = self.distance / 1000
        pace = format_duration(round(self.moving_time / kilometres)) if kilometres else "-"
        hours, rest = divmod(self.moving_time, 3600)
        return (f"{self.rank}. {prevent_highlight(self.label)} {math.floor(kilometres)}k "
                f"{hours}h{rest // 60:02} {pace}/k \u2191{round(self.elev_gain)}m {self.slope:.1f}%")


def window_around(entries: Sequence[E], target_rank: int,
                  window_size: int = DEFAULT_WINDOW_SIZE) -> List[E]:
    """Return a contiguous slice of window_size entries containing target_rank
    
    target_rank is 1-indexed and clamped to the valid range, so this never
    raises for out of range ranks.
    """
    length = len(entries)
    if length <= window_size:
        return list(entries)
    
    target_rank = min(max(target_rank, 1), length)
    half = window_size // 2
    
    if target_rank <= half:
        return list(entries[:window_size])
    if target_rank >= length - (half - 1):
        return list(entries[length - window_size:])
    
    start = target_rank - 1 - half
    start = min(max(start, 0), length - window_size)
    return list(entries[start:start + window_size])


def find_rank_by_label(entries: Sequence[RankedEntry], needle: str) -> Optional[int]:
    """Rank of the first entry whose label contains needle (case-insensitive), None if absent"""
    needle = needle.strip().lower()
    if not needle:
        return None
    for entry in entries:
        if needle in entry.label.lower():
            return entry.rank
    return None


def find_entries(entries: Sequence[RankedEntry], needle: str) -> List[RankedEntry]:
    """All entries whose label contains needle (case-insensitive), in ranking order"""
    needle = needle.strip().lower()
    if not needle:
        return []
    return [entry for entry in entries if needle in entry.label.lower()]
