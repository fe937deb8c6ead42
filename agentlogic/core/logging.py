import logging
import sys

from pythonjsonlogger import jsonlogger

from agentlogic.core.config import LOG_LEVEL


def setup_logging(level: str = LOG_LEVEL):
    """
    Configures centralized JSON logging on stdout.
    Keeps execution and HTTP logs verbose, database and transport layers quiet.
    """
    # 1. Get the root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # 2. Prevent duplicate logs by removing existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # 3. Single stdout handler, the container runtime collects it
    log_handler = logging.StreamHandler(sys.stdout)

    # 4. JSON format; fields passed through `extra=` land as top-level keys
    formatter = jsonlogger.JsonFormatter(
        fmt='%(asctime)s %(levelname)s %(name)s %(message)s',
        datefmt='%Y-%m-%dT%H:%M:%SZ'
    )
    log_handler.setFormatter(formatter)
    root_logger.addHandler(log_handler)

    # 5. Library-specific verbosity
    logging.getLogger("agentlogic").setLevel(level)

    # Every statement would otherwise be echoed at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    root_logger.info("Logging infrastructure initialized successfully.")
