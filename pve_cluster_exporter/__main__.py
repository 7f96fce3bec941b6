import logging
import sys

import uvicorn

from pve_cluster_exporter.app import create_app
from pve_cluster_exporter.config import load_settings
from pve_cluster_exporter.errors import ConfigError

log = logging.getLogger("pve_cluster_exporter")


def setup_logging(log_level):
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def main():
    try:
        settings = load_settings()
    except ConfigError as e:
        setup_logging("INFO")
        log.error(f"Invalid configuration: {e}")
        sys.exit(1)

    setup_logging(settings.log_level)
    app = create_app(settings)

    log.info(f"Server listening to {settings.listen_port}, metrics exposed on /metrics endpoint")
    uvicorn.run(app, host=settings.bind_address, port=settings.listen_port, log_config=None)


if __name__ == "__main__":
    main()
