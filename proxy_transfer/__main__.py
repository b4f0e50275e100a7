"""Run the gateway with uvicorn: ``python -m proxy_transfer``."""

import uvicorn

from .main import app, settings


def main() -> None:
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
