"""
Terminal Jarvis stats API entry point.

Serves live statistics, upstream health and the tool catalogue.
"""

import argparse

import uvicorn
from loguru import logger

from jarvis_api.api import create_app
from jarvis_api.log import configure_logging
from jarvis_api.settings import load_settings


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the Terminal Jarvis stats API")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=3000)
    parser.add_argument(
        "--env",
        choices=["development", "production"],
        default=None,
        help="Profile to use (default: APP_ENV)",
    )
    args = parser.parse_args()

    settings = load_settings(environment=args.env)
    configure_logging(settings.log_level)
    logger.info(f"Starting stats API ({settings.app_env.value}) on {args.host}:{args.port}")

    uvicorn.run(create_app(settings), host=args.host, port=args.port, log_level="info")


if __name__ == "__main__":
    main()
