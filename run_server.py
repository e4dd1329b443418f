#!/usr/bin/env python3
"""FastAPI server entry point for FocusGuard."""

import os

import uvicorn
from dotenv import load_dotenv

load_dotenv()


def main() -> None:
    import argparse

    parser = argparse.ArgumentParser(description="FocusGuard focus-session server")
    parser.add_argument("--host", default=os.getenv("FOCUSGUARD_HOST", "127.0.0.1"))
    parser.add_argument("--port", type=int, default=int(os.getenv("FOCUSGUARD_PORT", "8000")))
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload (development)")
    parser.add_argument(
        "--tick-seconds",
        type=float,
        default=None,
        help="Override SESSION_TICK_SECONDS (useful for demos)",
    )

    args = parser.parse_args()
    if args.tick_seconds is not None:
        os.environ["SESSION_TICK_SECONDS"] = str(args.tick_seconds)

    uvicorn.run(
        "server.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


if __name__ == "__main__":
    main()
