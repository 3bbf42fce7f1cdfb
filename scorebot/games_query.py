#!/usr/bin/env python3
"""
Query parsing for the games command
Turns the text after the trigger word into a structured Query

Syntax:
  anderlecht brugge              free terms, all must match a game
  --country San Marino           pin a country (multi-word)
  --competition Group K          pin a competition (multi-word)
  @today @live @yday @done ...   time modifiers, last one wins
  @bytime                        order results by kickoff
  epl, cl, psg ...               shortcuts from the shortcut table
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Pattern, Sequence, Tuple


class QueryTime(Enum):
    SLIDING_WINDOW = "sliding_window"
    TODAY = "today"
    TOMORROW = "tomorrow"
    YESTERDAY = "yesterday"
    FINISHED = "finished"
    LIVE = "live"
    UPCOMING = "upcoming"


class DisplayOrder(Enum):
    COUNTRY_COMPETITION = "country_competition"
    TIME = "time"


@dataclass(frozen=True)
class Query:
    """A parsed games query. Built once per command, never mutated."""
    free_terms: Tuple[str, ...] = ()
    country: Optional[str] = None
    competition: Optional[str] = None
    time_filter: QueryTime = QueryTime.SLIDING_WINDOW
    display_order: DisplayOrder = DisplayOrder.COUNTRY_COMPETITION


@dataclass(frozen=True)
class Shortcut:
    """An abbreviation that expands into query fields"""
    pattern: Pattern
    country: Optional[str] = None
    competition: Optional[str] = None
    expansion_terms: Tuple[str, ...] = ()
    display_order: Optional[DisplayOrder] = None

    def matches(self, token: str) -> bool:
        return self.pattern.fullmatch(token) is not None


def shortcut(pattern: str, country: Optional[str] = None, competition: Optional[str] = None,
             expansion_terms: Sequence[str] = (), display_order: Optional[DisplayOrder] = None) -> Shortcut:
    """Build a case-insensitive Shortcut from a regex string"""
    return Shortcut(re.compile(pattern, re.IGNORECASE), country, competition,
                    tuple(expansion_terms), display_order)


DEFAULT_SHORTCUTS: Tuple[Shortcut, ...] = (
    shortcut(r"[eb]pl", "England", "Premier League"),
    shortcut(r"(?:la?)?liga", "Spain", "LaLiga"),
    shortcut(r"u?cl", "Champions League"),
    shortcut(r"u?el", "Europa League"),
    shortcut(r"ecl", "Europa Conference League"),
    shortcut(r"bundes(?:liga)?", "Germany", "Bundesliga"),
    shortcut(r"serie[ -]?a", "Italy", "Serie A"),
    shortcut(r"mls", "USA", "MLS"),
    shortcut(r"w(?:orld)?-*c(?:up)?", "World Cup", display_order=DisplayOrder.TIME),
    shortcut(r"w(?:omen'?s?)?-*w(?:orld)?-*c(?:up)?", "Women's World Cup", display_order=DisplayOrder.TIME),
    shortcut(r"psg", expansion_terms=("Paris", "Saint-Germain")),
)

TIME_MODIFIERS: Dict[str, QueryTime] = {
    '@today': QueryTime.TODAY,
    '@now': QueryTime.LIVE,
    '@live': QueryTime.LIVE,
    '@tomorrow': QueryTime.TOMORROW,
    '@yesterday': QueryTime.YESTERDAY,
    '@yday': QueryTime.YESTERDAY,
    '@finished': QueryTime.FINISHED,
    '@past': QueryTime.FINISHED,
    '@done': QueryTime.FINISHED,
    '@upcoming': QueryTime.UPCOMING,
    '@soon': QueryTime.UPCOMING,
}

ORDER_MODIFIERS: Dict[str, DisplayOrder] = {
    '@bytime': DisplayOrder.TIME,
}

COUNTRY_DIRECTIVE = '--country'
COMPETITION_DIRECTIVE = '--competition'


class QueryParser:
    """Parses games queries using an injected shortcut table"""

    def __init__(self, shortcuts: Sequence[Shortcut] = DEFAULT_SHORTCUTS,
                 default_time: QueryTime = QueryTime.SLIDING_WINDOW,
                 default_order: DisplayOrder = DisplayOrder.COUNTRY_COMPETITION):
        self.shortcuts = tuple(shortcuts)
        self.default_time = default_time
        self.default_order = default_order

    def find_shortcut(self, token: str) -> Optional[Shortcut]:
        for candidate in self.shortcuts:
            if candidate.matches(token):
                return candidate
        return None

    def parse(self, text: str) -> Query:
        """Parse a query string, left to right"""
        free_terms: List[str] = []
        country: Optional[str] = None
        competition: Optional[str] = None
        time_filter = self.default_time
        display_order = self.default_order
        capturing: Optional[str] = None  # 'country' or 'competition'

        for token in text.strip().split(' '):
            lowered = token.lower()
            if lowered == COUNTRY_DIRECTIVE:
                capturing = 'country'
                country = ''
            elif lowered == COMPETITION_DIRECTIVE:
                capturing = 'competition'
                competition = ''
            elif lowered in TIME_MODIFIERS:
                time_filter = TIME_MODIFIERS[lowered]
            elif lowered in ORDER_MODIFIERS:
                display_order = ORDER_MODIFIERS[lowered]
            elif not token:
                continue
            elif capturing == 'country':
                country = f"{country} {token}" if country else token
            elif capturing == 'competition':
                competition = f"{competition} {token}" if competition else token
            else:
                match = self.find_shortcut(token)
                if match:
                    free_terms.extend(match.expansion_terms)
                    country = match.country
                    competition = match.competition
                    if match.display_order is not None:
                        display_order = match.display_order
                else:
                    free_terms.append(token)

        # A bare directive with nothing after it pins nothing
        return Query(
            free_terms=tuple(free_terms),
            country=country or None,
            competition=competition or None,
            time_filter=time_filter,
            display_order=display_order,
        )
