#!/usr/bin/env python3
"""
Score Bot for MeshCore networks
Answers football score, table and ranking commands over the mesh
"""

import argparse
import asyncio
import signal

from scorebot.core import ScoreBot


def main():
    parser = argparse.ArgumentParser(description="MeshCore football score bot")
    parser.add_argument('-c', '--config', default='config.ini', help="config file, created when missing")
    args = parser.parse_args()

    bot = ScoreBot(args.config)

    async def run():
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, lambda: setattr(bot, 'connected', False))
        await bot.start()

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        print("\nShutting down...")


if __name__ == "__main__":
    main()
