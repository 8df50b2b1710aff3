"""Run the API server: ``python -m gathevent_api``."""

import uvicorn

from gathevent_api.config import settings


def main() -> None:
    uvicorn.run(
        "gathevent_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_config=None,  # keep the structlog setup from gathevent_api.logging
    )


if __name__ == "__main__":
    main()
