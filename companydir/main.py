"""
Main application module.

Wires the company store, the Flask app and the HTTP server together
and shuts them down in order on SIGINT/SIGTERM.
"""
import argparse
import logging
import signal
import threading
from typing import Optional, Sequence

from .api import CompanyServer, create_app
from .config import Config, parse_log_level, parse_port
from .storage import CompanyStore

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="companydir",
        description="Serve a company directory stored in a fixed-width file.")
    parser.add_argument("--data-file", help="path of the data file")
    parser.add_argument("--host", help="address to listen on")
    parser.add_argument("--port", type=parse_port, help="port to listen on")
    parser.add_argument("--truncate", action="store_true", default=None,
                        help="empty the data file on startup")
    parser.add_argument("--sync-writes", action="store_true", default=None,
                        help="fsync the data file after every change")
    parser.add_argument("--log-level", type=parse_log_level,
                        help="logging level (DEBUG, INFO, WARNING, ...)")
    return parser


def load_config(argv: Optional[Sequence[str]] = None, environ=None) -> Config:
    """Read the environment, then let command-line flags override it."""
    config = Config.from_env(environ)
    args = build_parser().parse_args(argv)
    for key, value in vars(args).items():
        if value is not None:
            setattr(config, key, value)
    return config


def serve(config: Config) -> None:
    """
    Run the service until SIGINT or SIGTERM.

    Shutdown order: stop accepting requests, wait for in-flight requests
    to finish, then close the store.
    """
    store = CompanyStore.open(config.data_file, truncate=config.truncate,
                              sync_writes=config.sync_writes)
    try:
        server = CompanyServer(config.host, config.port, create_app(store))
    except OSError:
        store.close()
        raise

    def request_shutdown(signum, frame):
        logger.info("Received %s, shutting down", signal.Signals(signum).name)
        # shutdown() blocks until serve_forever() returns, so it cannot run
        # on the thread that is serving.
        threading.Thread(target=server.shutdown, name="shutdown").start()

    signal.signal(signal.SIGINT, request_shutdown)
    signal.signal(signal.SIGTERM, request_shutdown)

    host, port = server.server_address[:2]
    logger.info("Serving company directory on http://%s:%d", host, port)
    try:
        server.serve_forever()
    finally:
        server.server_close()
        store.close()
        logger.info("Shutdown complete")


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main entry point of the application."""
    config = load_config(argv)
    logging.basicConfig(
        level=config.log_level, format="%(asctime)s - %(levelname)s - %(message)s"
    )
    serve(config)


if __name__ == "__main__":
    main()
