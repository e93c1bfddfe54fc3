"""Run the relay server: `python -m filerelay` or the `filerelay` console script."""

import uvicorn

from filerelay.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "filerelay.main:app",
        host=settings.bind_host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
