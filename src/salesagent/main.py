"""
salesagent entry point.

This file handles startup concerns (arg-parsing, logging) and launches the appropriate interface
(API or CLI).
"""

import argparse
import logging
import sys

from salesagent.api.app import run_api
from salesagent.config import settings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _init_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        stream=sys.stdout,
    )
    # Keep per-request transport logs out of the conversation output
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------
def main(argv: list[str] | None = None) -> None:
    """
    Main entry point for the salesagent application.

    This function sets up the command-line interface, initializes logging, and starts the
    application in either API or CLI mode.
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = argparse.ArgumentParser(description="Run the security sales agent")
    parser.add_argument(
        "--mode",
        choices=["api", "cli"],
        type=str.lower,
        default="api",
        help="Launch the REST API, or the API plus an interactive CLI (default: api)",
    )
    parser.add_argument(
        "--agent",
        choices=["local", "http"],
        type=str.lower,
        default=settings.AGENT_BACKEND,
        help="Agent boundary back-end (default from env: %(default)s)",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error", "critical"],
        type=str.lower,
        default=settings.LOG_LEVEL,
        help="Logging level (default from env: %(default)s)",
    )
    args = parser.parse_args(argv)

    # Override settings with command-line arguments
    settings.LOG_LEVEL = args.log_level
    settings.AGENT_BACKEND = args.agent

    _init_logging(settings.LOG_LEVEL)

    logger.info("Starting salesagent [%s mode, %s agent]", args.mode, settings.AGENT_BACKEND)
    logger.debug("Settings: %s", settings.model_dump())

    if args.mode == "api":
        # Run only the API server
        run_api(host="0.0.0.0", port=settings.API_PORT, reload=settings.DEBUG)
        return

    # Lazy import to avoid threading the API when not needed
    import threading  # pylint: disable=import-outside-toplevel

    # Start API server in a separate thread
    api_thread = threading.Thread(
        target=run_api,
        kwargs={
            "host": "127.0.0.1",
            "port": settings.API_PORT,
            "reload": False,  # Reload doesn't work well with threading
            "log_level": "warning",
        },
        daemon=True,
    )
    api_thread.start()

    # Lazy import to avoid CLI dependencies if not needed
    from salesagent.client.cli import run_cli  # pylint: disable=import-outside-toplevel

    run_cli()


if __name__ == "__main__":
    main()
