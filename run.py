"""
Start the Voice Receptionist backend.

Usage:
    python run.py [--port PORT] [--host HOST] [--env-file PATH] [--reload]
"""

import argparse
import os
from pathlib import Path
from typing import List

import dotenv
import uvicorn

from receptionist.config.businesses import DEMO_BUSINESSES
from receptionist.config.logging_config import configure_logging


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Start the Voice Receptionist backend")
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("PORT", "8000")),
        help="Port to listen on (default: 8000 or PORT env var)",
    )
    parser.add_argument(
        "--host",
        default=os.getenv("HOST", "0.0.0.0"),
        help="Interface to bind (default: 0.0.0.0 or HOST env var)",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=Path(".env"),
        help="Environment file loaded before startup (default: .env)",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO or LOG_LEVEL env var)",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        default=os.getenv("ENV", "production").lower() == "development",
        help="Restart on code changes (default: on when ENV=development)",
    )
    return parser.parse_args(argv)


def check_environment() -> List[str]:
    """Return warnings about configuration the backend can run without."""
    warnings = []
    if not os.getenv("OPENAI_API_KEY"):
        warnings.append("OPENAI_API_KEY is not set; session requests will return 500")
    if not os.getenv("TELEGRAM_BOT_TOKEN"):
        warnings.append("TELEGRAM_BOT_TOKEN is not set; owners will not be notified of bookings")
    return warnings


def main(argv=None):
    args = parse_args(argv)
    if args.env_file.exists():
        dotenv.load_dotenv(args.env_file)

    logger = configure_logging(args.log_level)
    for warning in check_environment():
        logger.warning(warning)

    logger.info(f"Serving personas: {', '.join(sorted(DEMO_BUSINESSES))}")
    logger.info(f"Starting server on http://{args.host}:{args.port}")
    uvicorn.run(
        "receptionist.main:app",
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
        # Requests are logged by the handlers
        access_log=False,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
