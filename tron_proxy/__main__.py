"""Run the proxy: ``python -m tron_proxy``."""
import logging

import uvicorn

from .config import load_config
from .server import create_app

LOG_FORMAT = "%(asctime)s.%(msecs)03d [proxy] %(levelname)s %(name)s: %(message)s"


def main() -> None:
    config = load_config()
    logging.basicConfig(
        level=config.log_level.upper(),
        format=LOG_FORMAT,
        datefmt="%Y/%m/%d %H:%M:%S",
    )
    logger = logging.getLogger("tron_proxy")
    logger.info(f"Proxy server starting on {config.host}:{config.port}")
    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
