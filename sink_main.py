"""Entry point for the log ingestion server."""

import logging
import sys

from logferry.config import load_config
from logferry.sink_server import create_sink_app, run_sink_server


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    config = load_config()
    logging.getLogger(__name__).info(
        "Starting ingestion server on %s:%d", config.sink_host, config.sink_port,
    )
    run_sink_server(create_sink_app(), config.sink_host, config.sink_port)


if __name__ == "__main__":
    main()
