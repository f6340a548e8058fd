"""Entry point for running the application with uvicorn."""

import logging

import uvicorn

from dutch_payroll.config import settings


def main() -> None:
    """Run the application."""
    logging.basicConfig(level=settings.log_level)
    uvicorn.run(
        "dutch_payroll.api.app:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
