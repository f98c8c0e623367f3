import sys

import uvicorn

from frugal.config import get_settings


def main() -> None:
    settings = get_settings()
    # Both stores are in-process singletons: more than one worker would
    # mean several writers racing on the same blobs.
    if settings.server.workers != 1:
        print("frugal: forcing workers=1 (stores are single-process)", file=sys.stderr)
    uvicorn.run(
        "frugal.app:create_app",
        factory=True,
        host=settings.server.host,
        port=settings.server.port,
        workers=1,
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    sys.exit(main())  # type: ignore[func-returns-value]
