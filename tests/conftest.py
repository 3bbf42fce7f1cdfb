#!/usr/bin/env python3
"""
Shared test helpers: a mock bot and fake data providers
"""

import configparser
from datetime import datetime, timedelta, timezone

import pytest
import pytz

from scorebot.chat_output import ChatOutputFormatter
from scorebot.models import Competition, Country, Game, GameStatus, GameTree, MeshMessage
from scorebot.rate_limiter import RateLimiter, BotTxRateLimiter


TEST_CONFIG = """
[Bot]
enabled = true
command_prefix = !
timezone = UTC
max_message_bytes = 400

[Channels]
monitor_channels = Football
respond_to_dms = true

[Banned_Users]
banned_users = Troll

[Games_Command]
enabled = true
aliases = epl, genk

[Elo_Command]
enabled = true

[Table_Command]
enabled = true

[Fantasy_Command]
enabled = true

[Strava_Command]
enabled = true
ignored_athletes = 3

[Strava_Names]
2 = Eve
"""


class MockBot:
    """Mock bot for testing"""
    def __init__(self, config_text: str = TEST_CONFIG):
        self.logger = self
        self.config = configparser.ConfigParser()
        self.config.read_string(config_text)
        self.timezone = pytz.utc
        self.formatter = ChatOutputFormatter(pytz.utc, max_items=20, max_bytes=400)
        self.rate_limiter = RateLimiter(0)
        self.bot_tx_rate_limiter = BotTxRateLimiter(0)
        self.command_manager = MockCommandManager()
        self.connected = True
        self.meshcore = None
        self.logged = []

    def info(self, msg):
        self.logged.append(('INFO', msg))

    def debug(self, msg):
        self.logged.append(('DEBUG', msg))

    def warning(self, msg):
        self.logged.append(('WARNING', msg))

    def error(self, msg):
        self.logged.append(('ERROR', msg))


class MockCommandManager:
    """Records sent chunks instead of transmitting them"""
    def __init__(self):
        self.sent = []
        self.commands = {}
        self.banned_users = ['Troll']
        self.monitor_channels = ['Football']
        self.executed = []

    async def send_chunks(self, message, chunks):
        self.sent.extend(chunks)
        return [True] * len(chunks)

    async def execute_commands(self, message):
        self.executed.append(message.content)
        return True

    def get_plugin_by_name(self, name):
        return self.commands.get(name)

    def get_plugin_by_keyword(self, keyword):
        for command in self.commands.values():
            if keyword in command.keywords:
                return command
        return None


class FakeProvider:
    """Returns (or raises) the queued results in order, repeating the last one"""
    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    async def fetch(self):
        self.calls += 1
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return result


def dm(content: str, sender: str = "Alice") -> MeshMessage:
    return MeshMessage(content=content, sender_id=sender, is_dm=True)


def make_tree(now: datetime) -> GameTree:
    """Belgium and England fixtures around now"""
    return GameTree([
        Country("Belgium", [
            Competition("Pro League", [
                Game("Anderlecht", "Club Brugge", now - timedelta(hours=3), GameStatus.ENDED, 2, 1),
                Game("Genk", "Standard", now + timedelta(hours=2)),
            ]),
        ]),
        Country("England", [
            Competition("Premier League", [
                Game("Arsenal", "Chelsea", now - timedelta(hours=1), GameStatus.ONGOING, 1, 0, "67'"),
                Game("Liverpool", "Everton", now + timedelta(days=1, hours=2)),
            ]),
            Competition("Championship", [
                Game("Leeds", "Burnley", now - timedelta(days=1), GameStatus.ENDED, 0, 0),
            ]),
        ]),
    ])


@pytest.fixture
def bot():
    return MockBot()


@pytest.fixture
def fixed_now():
    return datetime(2024, 3, 10, 15, 0, tzinfo=timezone.utc)


@pytest.fixture
def tree(fixed_now):
    return make_tree(fixed_now)
