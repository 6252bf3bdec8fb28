#!/usr/bin/env python3
"""
BakeFlow startup script.

Usage:
    # Run the bot (Messenger webhook at /webhook)
    python run_bot.py

    # Seed the product catalog first
    python run_bot.py --seed

    # Run with custom port and auto-reload for development
    python run_bot.py --port 8001 --reload
"""

import argparse
import os


def run_bot(host: str = "0.0.0.0", port: int = 8000, reload: bool = False) -> None:
    database_url = os.getenv("DATABASE_URL", "sqlite:///./bakeflow.db")

    print(f"\n{'=' * 50}")
    print("Starting: BakeFlow Bot")
    print(f"Port:     {port}")
    print(f"Database: {database_url}")
    print(f"Messenger: {'live' if os.getenv('PAGE_ACCESS_TOKEN') else 'mock (no PAGE_ACCESS_TOKEN)'}")
    print(f"{'=' * 50}\n")

    import uvicorn

    uvicorn.run(
        "bakeflow_bot.main:app",
        host=host,
        port=port,
        reload=reload,
    )


def main():
    parser = argparse.ArgumentParser(description="Run the BakeFlow ordering bot")
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host to bind to (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        "-p",
        type=int,
        default=int(os.getenv("PORT", "8000")),
        help="Port to run on (default: $PORT or 8000)",
    )
    parser.add_argument(
        "--reload",
        "-r",
        action="store_true",
        help="Enable auto-reload for development",
    )
    parser.add_argument(
        "--seed",
        action="store_true",
        help="Create tables and seed the default products before starting",
    )

    args = parser.parse_args()

    if args.seed:
        from dotenv import load_dotenv
        load_dotenv()

        from bakeflow_bot.db import init_db
        from bakeflow_bot.seed_catalog import seed_catalog

        init_db()
        seed_catalog()

    run_bot(host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
