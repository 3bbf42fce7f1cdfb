#!/usr/bin/env python3
"""
UEFA gaming providers
Private league leaderboards for the UEFA fantasy and match predictor games
"""

import asyncio
import json
from typing import Any, Dict, List

import aiohttp

from .base import BaseProvider, FetchError, ParseError
from ..ranking import FantasyEntry, PredictorEntry


class UefaLeaderboardProvider(BaseProvider):
    """Two-step fetch: the leaderboard page sets cookies, then the JSON endpoint answers"""

    name = "uefa"

    def __init__(self, page_url: str, api_url: str, cookie: str = "", auth_header: str = "",
                 timeout_seconds: int = None):
        super().__init__(timeout_seconds)
        self.page_url = page_url
        self.api_url = api_url
        self.cookie = cookie
        self.auth_header = auth_header

    def build_headers(self) -> Dict[str, str]:
        headers = {'User-Agent': self.user_agent}
        if self.cookie:
            headers['Cookie'] = self.cookie
        if self.auth_header:
            headers['Authorization'] = self.auth_header
        return headers

    async def fetch_payload(self) -> Any:
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout, headers=self.build_headers()) as session:
                async with session.get(self.page_url) as response:
                    # Only needed for the cookies it sets
                    await response.read()
                async with session.get(self.api_url, headers={'Referer': self.page_url}) as response:
                    if response.status >= 400:
                        raise FetchError(f"HTTP {response.status} for {self.api_url}")
                    text = await response.text()
        except asyncio.TimeoutError as e:
            raise FetchError(f"Timeout after {self.timeout_seconds}s fetching {self.api_url}") from e
        except aiohttp.ClientError as e:
            raise FetchError(f"Request to {self.api_url} failed: {e}") from e
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid JSON from {self.api_url}: {e}") from e


class UefaFantasyProvider(UefaLeaderboardProvider):

    name = "uefa-fantasy"

    async def fetch(self) -> List[FantasyEntry]:
        return self.parse(await self.fetch_payload())

    @staticmethod
    def parse(payload: Any) -> List[FantasyEntry]:
        if isinstance(payload, dict) and 'title' in payload and 'data' not in payload:
            raise FetchError(f"Fantasy API error {payload.get('status')}: {payload.get('title')}")
        try:
            rows = payload['data']['value']['rest']
            return [
                FantasyEntry(
                    rank=int(row['rankNo']),
                    label=row['teamName'],
                    points=str(row.get('overallPoints') or ''),
                )
                for row in rows
            ]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ParseError(f"Unexpected fantasy leaderboard shape: {e}") from e


class UefaPredictorProvider(UefaLeaderboardProvider):

    name = "uefa-predictor"

    async def fetch(self) -> List[PredictorEntry]:
        return self.parse(await self.fetch_payload())

    @staticmethod
    def parse(payload: Any) -> List[PredictorEntry]:
        try:
            items = payload['data']['items']
            return [
                PredictorEntry(
                    rank=int(item['position']),
                    label=item['gh_user_data']['username'],
                    points=int(item.get('points') or 0),
                    matchday_points=int(item.get('current_md_points') or 0),
                )
                for item in items
            ]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ParseError(f"Unexpected predictor leaderboard shape: {e}") from e
