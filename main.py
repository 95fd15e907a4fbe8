"""
Lychii Slack Bot - Main Entry Point

Loads configuration, starts a bot session and exits with the session's
status so a supervisor (see run_all.py) can restart it.
"""

import sys
import argparse
import logging

from lychii import LychiiBot, load_config

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Lychii Slack Bot")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to bot config JSON file (e.g., bots/lychii.json)"
    )
    parser.add_argument(
        "--env-file",
        type=str,
        default=None,
        help="Path to a .env file with SLACK_BOT_TOKEN and SLACK_APP_TOKEN"
    )
    return parser.parse_args(argv)


def configure_logging(development: bool):
    logging.basicConfig(
        level=logging.DEBUG if development else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def main(argv=None) -> int:
    """Start the bot."""
    args = parse_args(argv)
    config = load_config(args.config, args.env_file)
    configure_logging(config.is_development)

    missing = [
        var for var, value in (
            ("SLACK_BOT_TOKEN", config.token),
            ("SLACK_APP_TOKEN", config.app_token),
        )
        if not value
    ]
    if missing:
        logger.error(f"Missing required environment variables: {', '.join(missing)}")
        return 1

    logger.info("Starting Lychii Slack Bot...")
    bot = LychiiBot(config)
    try:
        return bot.run()
    except KeyboardInterrupt:
        # run() has already closed the transport
        logger.info("Interrupted, shutting down")
        return 0


if __name__ == "__main__":
    sys.exit(main())
