"""Entry point for running litdesk as a module or installed script.

Usage:
    litdesk / python -m litdesk                → HTTP API (uvicorn)
    litdesk <command> ... / python -m litdesk <command> ... → CLI
"""

import sys
from typing import Optional

import uvicorn


def serve(host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Run the HTTP API with settings-derived defaults."""
    from litdesk.config import Settings
    from litdesk.logging_config import configure_logging

    settings = Settings.load()
    configure_logging(settings.log_level)
    uvicorn.run(
        "litdesk.web.app:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
    )


def run() -> None:
    """Entry point: no args → HTTP API, else → CLI."""
    if len(sys.argv) == 1:
        serve()
    else:
        from litdesk.cli import run_cli
        sys.exit(run_cli())


if __name__ == "__main__":
    run()
