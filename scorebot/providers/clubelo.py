#!/usr/bin/env python3
"""
ClubElo provider
Fetches the current club Elo ranking from api.clubelo.com (CSV)
"""

import csv
import io
from datetime import datetime, timezone
from typing import List

from .base import BaseProvider, ParseError
from ..ranking import EloEntry


class ClubEloProvider(BaseProvider):
    """Current clubelo.com ranking, one row per club"""
    
    name = "clubelo"
    BASE_URL = "http://api.clubelo.com"
    
    def ranking_url(self, day: datetime = None) -> str:
        day = day or datetime.now(timezone.utc)
        return f"{self.BASE_URL}/{day.strftime('%Y-%m-%d')}"
    
    async def fetch(self) -> List[EloEntry]:
        text = await self.fetch_text(self.ranking_url())
        return self.parse(text)
    
    @staticmethod
    def parse(text: str) -> List[EloEntry]:
        """Parse the Rank,Club,Country,Level,Elo,From,To CSV
        
        The Rank column is empty for clubs outside the official list, so
        ranks are assigned by position instead.
        """
        try:
            reader = csv.DictReader(io.StringIO(text))
            fieldnames = reader.fieldnames
            rows = list(reader)
        except csv.Error as e:
            raise ParseError(f"Unreadable clubelo CSV: {e}") from e
        required = {'Club', 'Country', 'Level', 'Elo'}
        if not fieldnames or not required.issubset(fieldnames):
            raise ParseError(f"Unexpected clubelo header: {fieldnames}")
        
        ranking = []
        for row in rows:
            if not row.get('Club'):
                continue
            try:
                elo = float(row['Elo'])
            except (TypeError, ValueError) as e:
                raise ParseError(f"Bad Elo value for {row.get('Club')}: {row.get('Elo')}") from e
            ranking.append(EloEntry(
                rank=len(ranking) + 1,
                label=row['Club'],
                country=row['Country'],
                level=row['Level'],
                elo=elo,
            ))
        return ranking
