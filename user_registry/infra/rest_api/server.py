"""Process entry point: ``user-registry [-a host:port] [-d dsn]``."""
import sys
from typing import Optional, Sequence

import uvicorn

from ..config import load_settings
from .main import create_app


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = load_settings(argv)
    app = create_app(settings)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        timeout_graceful_shutdown=int(settings.ctx_timeout) or 1,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
