"""sessiongate entrypoint.

Run with:
  python -m sessiongate
"""

import logging

import uvicorn

from sessiongate.app import create_app
from sessiongate.config import Settings

logger = logging.getLogger("sessiongate")


def main() -> None:
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Servidor iniciado en http://localhost:%s/", settings.port)
    common = {
        "host": settings.host,
        "port": settings.port,
        "log_level": settings.log_level.lower(),
    }
    if settings.reload:
        # The reloader re-imports the app in a worker process, so it needs the factory path.
        uvicorn.run("sessiongate.app:create_app", factory=True, reload=True, **common)
    else:
        uvicorn.run(create_app(settings), **common)

if __name__ == "__main__":
    main()
