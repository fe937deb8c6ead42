import os

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")


def is_production() -> bool:
    """Detects if running in production via ENVIRONMENT variable"""
    return ENVIRONMENT.lower() == "production"


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO" if is_production() else "DEBUG")

# Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./agentlogic.db")

# Front-end origins, comma separated
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGIN", "http://localhost:5173").split(",")
    if origin.strip()
]

# Test execution
TEST_TIMEOUT_MS = int(os.getenv("TEST_TIMEOUT_MS", "5000"))
PYTHON_EXECUTABLE = os.getenv("PYTHON_EXECUTABLE", "python3")
SANDBOX_MEMORY_LIMIT_BYTES = int(os.getenv("SANDBOX_MEMORY_LIMIT_BYTES", str(64 * 1024 * 1024)))
SANDBOX_MAX_STACK_BYTES = int(os.getenv("SANDBOX_MAX_STACK_BYTES", str(1024 * 1024)))
MAX_CODE_LENGTH = int(os.getenv("MAX_CODE_LENGTH", "10000"))
MAX_TEST_CASES = int(os.getenv("MAX_TEST_CASES", "50"))

# Rate limits (slowapi syntax)
DEFAULT_RATE_LIMIT = os.getenv("DEFAULT_RATE_LIMIT", "100/minute")
RUN_TESTS_RATE_LIMIT = os.getenv("RUN_TESTS_RATE_LIMIT", "10/minute")
