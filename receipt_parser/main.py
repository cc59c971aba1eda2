"""Application entry point for the Receipt Parser API server."""

import uvicorn

from receipt_parser.api.app import app
from receipt_parser.utils.config import load_config
from receipt_parser.utils.logger import setup_logging


def main() -> None:
    """Start the FastAPI application server."""
    config = load_config()
    setup_logging(config.log_level)
    uvicorn.run(app, host=config.api.host, port=config.api.port)


if __name__ == "__main__":
    main()
