#!/usr/bin/env python3
"""
Chat output formatting for the Score Bot
Renders games and rankings to text and splits it into transport-sized messages
"""

from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import List, Optional, Sequence

import pytz
import regex

from .models import Game, GameRow, GameStatus


DEFAULT_MAX_BYTES = 400
DEFAULT_MAX_ITEMS = 20

# One user-perceived character, including combined emoji sequences
GRAPHEME = regex.compile(r'\X')


def byte_length(text: str) -> int:
    return len(text.encode('utf-8'))


@dataclass
class Rendered:
    """Display lines plus an optional truncation notice that goes out first"""
    lines: List[str] = field(default_factory=list)
    notice: Optional[str] = None


class ChatOutputFormatter:
    """Formats results for a text channel with a hard per-message byte limit"""

    def __init__(self, timezone: Optional[tzinfo] = None,
                 max_items: int = DEFAULT_MAX_ITEMS, max_bytes: int = DEFAULT_MAX_BYTES):
        self.timezone = timezone or pytz.utc
        self.max_items = max_items
        self.max_bytes = max_bytes

    def format_game(self, game: Game, now: Optional[datetime] = None) -> str:
        """One line per game, depending on its status"""
        home_score = '?' if game.home_score is None else game.home_score
        away_score = '?' if game.away_score is None else game.away_score

        if game.status == GameStatus.ENDED:
            return f"(FT) {game.home} {home_score}-{away_score} {game.away}"
        if game.status == GameStatus.ONGOING:
            return f"({game.elapsed or 'live'}) {game.home} {home_score}-{away_score} {game.away}"
        if game.status == GameStatus.POSTPONED:
            return f"(postp.) {game.home} - {game.away}"
        if game.status == GameStatus.CANCELLED:
            return f"(cancld) {game.home} - {game.away}"

        now = (now or datetime.now(self.timezone)).astimezone(self.timezone)
        kickoff = game.start_time.astimezone(self.timezone)
        if kickoff.date() == now.date():
            return f"({kickoff.strftime('%H:%M')}) {game.home} - {game.away}"
        return f"({kickoff.strftime('%d/%m %H:%M')}) {game.home} - {game.away}"

    def _truncate(self, items: Sequence, max_items: Optional[int], what: str):
        limit = self.max_items if max_items is None else max_items
        total = len(items)
        notice = None
        if total > limit:
            notice = f"Too many {what} ({total}). Showing first {limit}."
        return list(items[:limit]), notice

    def render_games(self, rows: Sequence[GameRow], now: Optional[datetime] = None,
                     max_items: Optional[int] = None) -> Rendered:
        """Game lines, prefixed with <Country> and [Competition] whenever they change"""
        shown, notice = self._truncate(rows, max_items, "games")
        lines = []
        previous_country = None
        previous_competition = None
        for row in shown:
            prefix = ""
            if row.country != previous_country:
                prefix += f"<{row.country}> "
            if row.competition != previous_competition or row.country != previous_country:
                prefix += f"[{row.competition}] "
            lines.append(prefix + self.format_game(row.game, now))
            previous_country = row.country
            previous_competition = row.competition
        return Rendered(lines, notice)

    def render_ranking(self, entries: Sequence, max_items: Optional[int] = None) -> Rendered:
        shown, notice = self._truncate(entries, max_items, "results")
        return Rendered([str(entry) for entry in shown], notice)

    @staticmethod
    def no_data_message(what: str) -> str:
        return f"No {what} data available yet."

    def chunk(self, text: str, max_bytes: Optional[int] = None) -> List[str]:
        """Split text into pieces of at most max_bytes UTF-8 bytes

        Each piece is filled greedily and cut between grapheme clusters, so
        ASCII text always gives ceil(bytes / max_bytes) pieces. A grapheme
        that is larger than max_bytes on its own is cut between its code
        points. Joining the pieces gives back the original text.
        max_bytes must be at least 4, the size of the largest code point.
        """
        max_bytes = max_bytes or self.max_bytes
        if byte_length(text) <= max_bytes:
            return [text]

        chunks: List[str] = []
        current: List[str] = []
        size = 0
        for grapheme in GRAPHEME.findall(text):
            pieces = [grapheme] if byte_length(grapheme) <= max_bytes else list(grapheme)
            for piece in pieces:
                piece_size = byte_length(piece)
                if current and size + piece_size > max_bytes:
                    chunks.append(''.join(current))
                    current = []
                    size = 0
                current.append(piece)
                size += piece_size
        if current:
            chunks.append(''.join(current))
        return chunks

    def pack(self, lines: Sequence[str], separator: str = " ",
             max_bytes: Optional[int] = None) -> List[str]:
        """Join lines into as few messages as fit, never splitting a line that fits on its own"""
        max_bytes = max_bytes or self.max_bytes
        messages: List[str] = []
        current = ""
        for line in lines:
            if not line:
                continue
            candidate = f"{current}{separator}{line}" if current else line
            if byte_length(candidate) <= max_bytes:
                current = candidate
                continue
            if current:
                messages.append(current)
            if byte_length(line) <= max_bytes:
                current = line
            else:
                pieces = self.chunk(line, max_bytes)
                messages.extend(pieces[:-1])
                current = pieces[-1]
        if current:
            messages.append(current)
        return messages

    def to_messages(self, rendered: Rendered, separator: str = " ", prefix: str = "",
                    max_bytes: Optional[int] = None) -> List[str]:
        """Notice as its own first message, then the packed body"""
        max_bytes = max_bytes or self.max_bytes
        messages = []
        if rendered.notice:
            messages.extend(self.chunk(rendered.notice, max_bytes))
        body = list(rendered.lines)
        if prefix and body:
            body[0] = f"{prefix}{body[0]}"
        messages.extend(self.pack(body, separator, max_bytes))
        return messages
