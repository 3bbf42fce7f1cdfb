#!/usr/bin/env python3
"""
Soccerway league table provider
Scrapes a competition table page into TableEntry rows
"""

from typing import List

from bs4 import BeautifulSoup

from .base import BaseProvider, ParseError
from ..ranking import TableEntry


TABLE_ROW_SELECTOR = "table.leaguetable.sortable.table.detailed-table tbody tr"


class SoccerwayTableProvider(BaseProvider):
    """League table for one soccerway competition or group url"""
    
    name = "soccerway"
    
    def __init__(self, url: str, timeout_seconds: int = None):
        super().__init__(timeout_seconds)
        self.url = url
    
    async def fetch(self) -> List[TableEntry]:
        html = await self.fetch_text(self.url)
        return self.parse(html)
    
    @staticmethod
    def _int(cell) -> int:
        text = cell.get_text(strip=True).replace('+', '')
        return int(text) if text else 0
    
    @classmethod
    def parse(cls, html: str) -> List[TableEntry]:
        """Parse the detailed league table
        
        Columns: rank, (movement), team, played, win, draw, lose, gf, ga, gd, points
        """
        soup = BeautifulSoup(html, 'html.parser')
        ranking = []
        for row in soup.select(TABLE_ROW_SELECTOR):
            cells = row.find_all('td')
            if len(cells) < 11:
                continue
            try:
                ranking.append(TableEntry(
                    rank=cls._int(cells[0]),
                    label=cells[2].get_text(strip=True),
                    played=cls._int(cells[3]),
                    win=cls._int(cells[4]),
                    draw=cls._int(cells[5]),
                    lose=cls._int(cells[6]),
                    goals_for=cls._int(cells[7]),
                    goals_against=cls._int(cells[8]),
                    goal_difference=cls._int(cells[9]),
                    points=cls._int(cells[10]),
                ))
            except ValueError as e:
                raise ParseError(f"Unexpected table row: {row.get_text(' ', strip=True)}") from e
        return ranking
