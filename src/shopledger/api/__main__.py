"""
shopledger.api.__main__

`python -m shopledger.api` starts the email relay on `SHOPLEDGER_API_HOST:SHOPLEDGER_API_PORT`.
"""

from __future__ import annotations

import uvicorn

from shopledger.api.app import create_app
from shopledger.settings import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        create_app(settings=settings),
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,  # structlog owns log formatting
    )


if __name__ == "__main__":
    main()
