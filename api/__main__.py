"""
Development server: python -m api

Production deployments serve create_app() from a WSGI server instead.
"""
import logging
import os

from . import create_app

logger = logging.getLogger("api")


def main():
    app = create_app(os.getenv("APP_ENV", "dev"))
    host = os.getenv("FLASK_RUN_HOST", "127.0.0.1")
    port = int(os.getenv("FLASK_RUN_PORT", "8000"))
    logger.info("Vehicle Management API docs at http://%s:%d/apidocs/", host, port)
    app.run(host=host, port=port, debug=app.debug)


if __name__ == "__main__":
    main()
