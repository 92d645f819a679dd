"""Run the application summary MCP server over SSE."""

import logging
import os

from appsummary.server import build_server
from appsummary.settings import Settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _configure_logging() -> None:
    level_name = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"
    unknown_level = not isinstance(logging.getLevelName(level_name), int)
    logging.basicConfig(level=logging.INFO if unknown_level else level_name, format=LOG_FORMAT)
    if unknown_level:
        logging.getLogger(__name__).warning("Unknown LOG_LEVEL %r; using INFO.", level_name)
    # httpx logs every request at INFO; one summary issues up to five of them.
    if logging.getLogger().level > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)


def main() -> None:
    _configure_logging()
    logger = logging.getLogger("appsummary")
    settings = Settings.load()
    server = build_server(settings)

    server.startup()
    logger.info(
        "Summarizing applications from %s; MCP SSE endpoint at http://localhost:%s/sse",
        settings.cf_api_url,
        settings.mcp_sse_port,
    )
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Interrupted; stopping.")
    except Exception:
        logger.exception("Server stopped due to an unexpected error.")
        raise
    finally:
        server.shutdown()
        logger.info("Control-plane client closed.")


if __name__ == "__main__":
    main()
