#!/usr/bin/env python3
"""
Core Score Bot functionality
Contains the main bot class: configuration, logging and the MeshCore connection
"""

import asyncio
import configparser
import logging
import traceback
from pathlib import Path

import colorlog
import meshcore
import pytz
from meshcore import EventType
from meshcore_cli.meshcore_cli import next_cmd

from .channel_manager import ChannelManager
from .chat_output import ChatOutputFormatter, DEFAULT_MAX_BYTES, DEFAULT_MAX_ITEMS
from .command_manager import CommandManager
from .message_handler import MessageHandler
from .rate_limiter import RateLimiter, BotTxRateLimiter


DEFAULT_CONFIG = """[Connection]
# serial or ble
connection_type = serial
serial_port = /dev/ttyUSB0
ble_device_name = MeshCore
timeout = 30

[Bot]
bot_name = ScoreBot
enabled = true
command_prefix = !
timezone = Europe/Brussels
# Per-user seconds between handled commands
rate_limit_seconds = 10
# Seconds between two messages sent by the bot
bot_tx_rate_limit_seconds = 1.0
# Hard limit of one mesh message, in UTF-8 bytes
max_message_bytes = 400
max_items = 20
# Default timeout for data provider requests
http_timeout = 10

[Channels]
monitor_channels = Football
respond_to_dms = true

[Banned_Users]
banned_users =

[Logging]
log_level = INFO
log_file = score_bot.log
colored_output = true
meshcore_log_level = WARNING

[Games_Command]
enabled = true
cache_minutes = 2
# ESPN league codes to follow
leagues = eng.1, esp.1, ger.1, ita.1, fra.1, ned.1, bel.1, uefa.champions, uefa.europa
# Whole-message aliases: !epl behaves like !games epl
aliases = epl, genk
window_hours_back = 10
window_hours_ahead = 16

[Elo_Command]
enabled = true
cache_hours = 12
top = 15

[Table_Command]
enabled = true
cache_minutes = 30

[Table_Leagues]
# name = soccerway table url | alias, alias
# jpl = https://int.soccerway.com/national/belgium/pro-league/ | belgium, pro-league

[Fantasy_Command]
enabled = false
cache_minutes = 3
top = 15
fantasy_page_url =
fantasy_api_url =
predictor_page_url =
predictor_api_url =
cookie =
auth_header =

[Strava_Command]
enabled = false
cache_minutes = 2
top = 10
club_id =
# Comma separated athlete ids left off the leaderboard
ignored_athletes =

[Strava_Names]
# athlete_id = name shown instead of the Strava first name
"""


class ScoreBot:
    """Sports score bot for MeshCore networks"""

    def __init__(self, config_file: str = "config.ini"):
        self.config_file = config_file
        self.config = configparser.ConfigParser()
        self.load_config()

        self.setup_logging()

        self.meshcore = None
        self.connected = False

        self.timezone = self.get_timezone()
        self.formatter = ChatOutputFormatter(
            timezone=self.timezone,
            max_items=self.config.getint('Bot', 'max_items', fallback=DEFAULT_MAX_ITEMS),
            max_bytes=self.config.getint('Bot', 'max_message_bytes', fallback=DEFAULT_MAX_BYTES),
        )

        self.rate_limiter = RateLimiter(
            self.config.getint('Bot', 'rate_limit_seconds', fallback=10)
        )
        self.bot_tx_rate_limiter = BotTxRateLimiter(
            self.config.getfloat('Bot', 'bot_tx_rate_limit_seconds', fallback=1.0)
        )
        self.channel_manager = ChannelManager(self)
        self.message_handler = MessageHandler(self)
        self.command_manager = CommandManager(self)

        self.logger.info(f"Score Bot initialized: {self.config.get('Bot', 'bot_name', fallback='ScoreBot')}")

    def load_config(self):
        """Load configuration from file"""
        if not Path(self.config_file).exists():
            self.create_default_config()

        self.config.read(self.config_file)

    def create_default_config(self):
        """Create default configuration file"""
        with open(self.config_file, 'w') as f:
            f.write(DEFAULT_CONFIG)
        # Logger is not configured yet
        print(f"Created default config file: {self.config_file}")

    def get_timezone(self):
        """Configured display timezone, UTC when missing or unknown"""
        name = self.config.get('Bot', 'timezone', fallback='UTC')
        try:
            return pytz.timezone(name)
        except pytz.exceptions.UnknownTimeZoneError:
            self.logger.warning(f"Unknown timezone '{name}', using UTC")
            return pytz.utc

    def setup_logging(self):
        """Setup logging configuration"""
        log_level = getattr(logging, self.config.get('Logging', 'log_level', fallback='INFO'))

        if self.config.getboolean('Logging', 'colored_output', fallback=True):
            formatter = colorlog.ColoredFormatter(
                '%(log_color)s%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S',
                log_colors={
                    'DEBUG': 'cyan',
                    'INFO': 'green',
                    'WARNING': 'yellow',
                    'ERROR': 'red',
                    'CRITICAL': 'red,bg_white',
                }
            )
        else:
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )

        self.logger = logging.getLogger('ScoreBot')
        self.logger.setLevel(log_level)
        self.logger.handlers.clear()

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

        log_file = self.config.get('Logging', 'log_file', fallback='score_bot.log')
        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

        self.logger.propagate = False

        # Library modules (cache, providers) log under the scorebot package
        library_logger = logging.getLogger('scorebot')
        library_logger.setLevel(log_level)
        library_logger.handlers = list(self.logger.handlers)
        library_logger.propagate = False

        meshcore_log_level = getattr(logging, self.config.get('Logging', 'meshcore_log_level', fallback='WARNING'))
        for logger_name in ('meshcore', 'meshcore_cli'):
            logging.getLogger(logger_name).setLevel(meshcore_log_level)

        self.logger.info(f"Logging configured - Bot: {logging.getLevelName(log_level)}, MeshCore: {logging.getLevelName(meshcore_log_level)}")

    async def connect(self) -> bool:
        """Connect to the MeshCore node"""
        try:
            self.logger.info("Connecting to MeshCore node...")

            connection_type = self.config.get('Connection', 'connection_type', fallback='serial').lower()
            self.logger.info(f"Using connection type: {connection_type}")

            if connection_type == 'serial':
                serial_port = self.config.get('Connection', 'serial_port', fallback='/dev/ttyUSB0')
                self.logger.info(f"Connecting via serial port: {serial_port}")
                self.meshcore = await meshcore.MeshCore.create_serial(serial_port, debug=False)
            else:
                ble_device_name = self.config.get('Connection', 'ble_device_name', fallback=None)
                self.logger.info("Connecting via BLE" + (f" to device: {ble_device_name}" if ble_device_name else ""))
                self.meshcore = await meshcore.MeshCore.create_ble(ble_device_name, debug=False)

            if not self.meshcore or not self.meshcore.is_connected:
                self.logger.error("Failed to connect to MeshCore node")
                return False

            self.connected = True
            self.logger.info(f"Connected to: {self.meshcore.self_info}")

            await self.load_contacts()
            await self.channel_manager.fetch_channels()
            await self.setup_message_handlers()
            return True

        except Exception as e:
            self.logger.error(f"Connection failed: {e}")
            self.logger.debug(traceback.format_exc())
            return False

    async def load_contacts(self):
        """Contacts are needed to resolve DM senders and recipients"""
        try:
            result = await next_cmd(self.meshcore, ["contacts"])
            self.logger.info(f"Contacts loaded: {len(result) if result else 0} contacts")
        except Exception as e:
            self.logger.warning(f"Error loading contacts: {e}")

    async def setup_message_handlers(self):
        """Subscribe to incoming DMs and channel messages"""
        async def on_contact_message(event, metadata=None):
            await self.message_handler.handle_contact_message(event, metadata)

        async def on_channel_message(event, metadata=None):
            await self.message_handler.handle_channel_message(event, metadata)

        self.meshcore.subscribe(EventType.CONTACT_MSG_RECV, on_contact_message)
        self.meshcore.subscribe(EventType.CHANNEL_MSG_RECV, on_channel_message)

        await self.meshcore.start_auto_message_fetching()

        self.logger.info("Message handlers setup complete")

    async def start(self):
        """Start the bot"""
        self.logger.info("Starting Score Bot...")

        if not await self.connect():
            self.logger.error("Failed to connect to MeshCore node")
            return

        self.message_handler.start()

        self.logger.info("Bot is running. Press Ctrl+C to stop.")
        try:
            while self.connected:
                await asyncio.sleep(1)
        finally:
            await self.stop()

    async def stop(self):
        """Stop the bot"""
        if not self.connected and not self.meshcore:
            return
        self.logger.info("Stopping Score Bot...")
        self.connected = False

        await self.message_handler.stop()
        if self.meshcore:
            await self.meshcore.disconnect()
            self.meshcore = None

        self.logger.info("Bot stopped")
