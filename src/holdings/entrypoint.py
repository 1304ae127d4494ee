"""Server entrypoint; starts uvicorn on the configured host and port."""

import uvicorn

from holdings.main import app
from holdings.config.settings import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
