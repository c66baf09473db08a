"""Run the API server: python -m costpilot.api"""

import uvicorn

from costpilot.api.app import create_app
from costpilot.config import get_settings


def main() -> None:
    settings = get_settings().app
    uvicorn.run(
        create_app(),
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
