from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from agentlogic import models  # noqa: F401  registers tables on Base.metadata
from agentlogic.core.config import CORS_ORIGINS, ENVIRONMENT
from agentlogic.core.db import init_models
from agentlogic.core.logging import setup_logging
from agentlogic.exceptions import (
    ExerciseNotFoundError,
    ValidationError,
    not_found_exception_handler,
    request_validation_exception_handler,
    validation_exception_handler,
)
from agentlogic.middleware.rate_limit import custom_rate_limit_exceeded, limiter
from agentlogic.routers import exercises, health, metrics, test_execution

setup_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_models()
    logger.info("AgentLogic API started", extra={"environment": ENVIRONMENT})
    yield


app = FastAPI(title="AgentLogic Test Execution API", lifespan=lifespan)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, custom_rate_limit_exceeded)
app.add_middleware(SlowAPIMiddleware)

# Register exception handlers
app.add_exception_handler(ValidationError, validation_exception_handler)
app.add_exception_handler(ExerciseNotFoundError, not_found_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],   # Allows POST, GET, OPTIONS, etc
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(metrics.router)
app.include_router(test_execution.router)
app.include_router(exercises.router)
