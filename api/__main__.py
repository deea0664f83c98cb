"""
Development server: `python -m api`.

Configuration comes from APP_ENV (see api.config.get_config); bind address
from POSTS_API_HOST / POSTS_API_PORT. Production deployments serve
`api:create_app()` from a WSGI server instead.
"""
import logging
import os

from . import create_app

logger = logging.getLogger(__name__)


def main() -> None:
    app = create_app()
    host = os.getenv("POSTS_API_HOST", "127.0.0.1")
    port = int(os.getenv("POSTS_API_PORT", "8000"))
    logger.info("serving %s config on http://%s:%d", app.config["APP_ENV"], host, port)
    app.run(host=host, port=port, debug=app.config["DEBUG"])


if __name__ == "__main__":
    main()
