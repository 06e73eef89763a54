"""Entrypoint that reads PORT from the environment (or .env) and starts the server."""
import logging

import uvicorn

from app.config import settings
from app.logging_config import configure_logging

server_logger = logging.getLogger("app.server")


class ListeningServer(uvicorn.Server):
    """uvicorn server that announces its URL once the socket is bound."""

    async def startup(self, sockets=None):
        # A failed bind exits inside super().startup(), before the announcement.
        await super().startup(sockets=sockets)
        if self.started:
            server_logger.info(f"Server is running on http://{self.config.host}:{self.config.port}")


def build_server() -> ListeningServer:
    config = uvicorn.Config("app.main:app", host=settings.host, port=settings.port, access_log=False)
    return ListeningServer(config)


def main():
    configure_logging(settings.log_level)
    # Bind errors (port in use, bad port) are left to terminate the process.
    build_server().run()


if __name__ == "__main__":
    main()
