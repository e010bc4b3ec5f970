#!/usr/bin/env python3
"""
YouTube Live Chat Bot - Entry Point
Loads configuration from the environment (.env supported) and starts the bot.
"""

import signal
import sys

from bot import YouTubeChatBot
from config_loader import load_config
from log_utils import log
from status_server import StatusServer


def main():
    try:
        config = load_config()
    except ValueError as e:
        print("=" * 60)
        print("ERROR: Configuration incomplete!")
        print("=" * 60)
        print(f"\n{e}")
        print("\nPlease set these in your hosting platform dashboard.")
        print("=" * 60)
        return 1

    log("All required environment variables found")

    bot = YouTubeChatBot(config)
    server = StatusServer(bot, port=config.port)

    def _shutdown(signum, frame):
        log("Bot shutting down gracefully...")
        bot.stop()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    server.start()
    try:
        bot.start()
    finally:
        server.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
