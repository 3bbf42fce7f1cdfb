#!/usr/bin/env python3
"""
Base provider interface for the Score Bot
Providers fetch a fully parsed snapshot from a remote data source
"""

import asyncio
import json
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import aiohttp


class ScoreBotError(Exception):
    """Base class for all Score Bot errors"""


class FetchError(ScoreBotError):
    """Network or transport failure while talking to a provider"""


class ParseError(ScoreBotError):
    """Provider response did not have the expected shape"""


class BaseProvider(ABC):
    """Base class for data providers - one fetch() per data source"""
    
    name: str = ""
    timeout_seconds: int = 10
    user_agent = "Mozilla/5.0 (X11; Linux x86_64; rv:128.0) Gecko/20100101 Firefox/128.0"
    
    def __init__(self, timeout_seconds: Optional[int] = None):
        if timeout_seconds is not None:
            self.timeout_seconds = timeout_seconds
    
    @abstractmethod
    async def fetch(self) -> Any:
        """Fetch and parse a snapshot, raising FetchError or ParseError on failure"""
        pass
    
    async def fetch_text(self, url: str, headers: Optional[Dict[str, str]] = None) -> str:
        """GET a url and return the body as text"""
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        request_headers = {'User-Agent': self.user_agent}
        request_headers.update(headers or {})
        try:
            async with aiohttp.ClientSession(timeout=timeout, headers=request_headers) as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        raise FetchError(f"HTTP {response.status} for {url}")
                    return await response.text()
        except asyncio.TimeoutError as e:
            raise FetchError(f"Timeout after {self.timeout_seconds}s fetching {url}") from e
        except aiohttp.ClientError as e:
            raise FetchError(f"Request to {url} failed: {e}") from e
    
    async def fetch_json(self, url: str, headers: Optional[Dict[str, str]] = None) -> Any:
        """GET a url and decode the body as JSON"""
        text = await self.fetch_text(url, headers=headers)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid JSON from {url}: {e}") from e
