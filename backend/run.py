"""
Development server entry point.

Reload defaults to on in development and off elsewhere; the log level
follows LOG_LEVEL from settings.

Usage:
    python run.py                    # settings-driven defaults
    python run.py --no-reload        # force reload off
    python run.py --host 0.0.0.0 --port 5000
"""
import argparse
import sys

import uvicorn

from portfolio_api.config import settings

if sys.platform == "win32":
    import asyncio

    # asyncpg needs a selector loop; uvicorn picks the proactor loop on Windows.
    import uvicorn.loops.asyncio as _uvicorn_loops

    _uvicorn_loops.asyncio_loop_factory = lambda use_subprocess=False: asyncio.SelectorEventLoop


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the portfolio API")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=5000)
    parser.add_argument(
        "--reload",
        action=argparse.BooleanOptionalAction,
        default=settings.APP_ENV == "development",
    )
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = parse_args()
    uvicorn.run(
        "portfolio_api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.LOG_LEVEL.lower(),
        loop="asyncio",
    )
