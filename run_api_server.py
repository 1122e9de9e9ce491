"""
FastAPI Server Startup Script
Run this to start the Invoice API server
"""

import uvicorn
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from invoice_api.config import get_settings  # noqa: E402
from invoice_api.logs import logger  # noqa: E402

log = logger("run_api_server")


def main():
    """Start the FastAPI server"""
    settings = get_settings()

    log.info("Starting Invoice API server (%s)", settings.environment)
    log.info("Server will run on: http://%s:%s", settings.host, settings.port)
    log.info("API documentation: http://%s:%s/docs", settings.host, settings.port)
    log.info("Health check: http://%s:%s/health", settings.host, settings.port)

    uvicorn.run(
        "invoice_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


if __name__ == "__main__":
    main()
