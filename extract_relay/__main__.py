"""Run the relay: `python -m extract_relay`.

Uvicorn owns signal handling: SIGINT/SIGTERM stop accepting connections and
the process exits 0.
"""

from __future__ import annotations

import uvicorn

from extract_relay.core.logging import setup_logging
from extract_relay.core.settings import load_settings
from extract_relay.main import create_app


def main() -> None:
    settings = load_settings()
    setup_logging(settings.log_level)
    app = create_app(settings)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        # Our JSON logging config stays in charge of uvicorn's loggers.
        log_config=None,
    )


if __name__ == "__main__":
    main()
