"""
Pytest configuration and shared fixtures for the AgentLogic test suite.

This module provides:
- Database fixtures (in-memory SQLite for fast tests)
- FastAPI async client with dependency overrides
- Runner and orchestrator fixtures that use the current interpreter
- A reusable AsyncSession test double
"""

import sys
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from agentlogic.core.db import Base, get_db
from agentlogic.execution.orchestrator import TestBatchOrchestrator
from agentlogic.execution.process_runner import PythonProcessRunner
from agentlogic.execution.sandbox_runner import JavaScriptSandboxRunner
from agentlogic.main import app
from agentlogic.middleware.rate_limit import limiter
from agentlogic.models.exercise import Exercise
from agentlogic.routers.test_execution import get_orchestrator
from agentlogic.schemas.test_execution import Language, TestCase, TestResult


# Test Database Configuration
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """Every test starts with an empty rate-limit window."""
    limiter.reset()
    yield
    limiter.reset()


@pytest_asyncio.fixture
async def async_engine():
    """Create async engine for testing with in-memory SQLite."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def async_db_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create async database session for testing."""
    async_session = async_sessionmaker(
        async_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def python_runner() -> PythonProcessRunner:
    """Process runner bound to the interpreter running the tests."""
    return PythonProcessRunner(executable=sys.executable, timeout_ms=5000)


@pytest.fixture
def javascript_runner() -> JavaScriptSandboxRunner:
    return JavaScriptSandboxRunner(timeout_ms=5000)


@pytest.fixture
def orchestrator(python_runner, javascript_runner) -> TestBatchOrchestrator:
    return TestBatchOrchestrator(
        runners={
            Language.JAVASCRIPT: javascript_runner,
            Language.PYTHON: python_runner,
        }
    )


@pytest_asyncio.fixture
async def async_client(async_db_session, orchestrator) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client with database and orchestrator overrides."""

    async def override_get_db():
        yield async_db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# Test Data Factories
@pytest_asyncio.fixture
async def test_exercise(async_db_session) -> Exercise:
    """Create a stored Python exercise with two test cases."""
    exercise = Exercise(
        title="Sum two numbers",
        description="Write a function that adds two integers.",
        language="python",
        difficulty="easy",
        function_name="add",
        test_cases=[
            {"input": [2, 3], "expectedOutput": 5},
            {"input": [-1, 1], "expectedOutput": 0, "description": "opposites"},
        ],
    )
    async_db_session.add(exercise)
    await async_db_session.commit()
    await async_db_session.refresh(exercise)
    return exercise


def make_result(test_case: TestCase, passed: bool = True, error: str = None) -> TestResult:
    """Build a TestResult the way a runner would."""
    if error:
        return TestResult.failure(test_case, error, execution_time=1)
    return TestResult.success(test_case, test_case.expected_output, passed, execution_time=1)


def assert_result_shape(result: dict):
    """Assert that a serialized TestResult carries every wire field."""
    for field in ["passed", "input", "expectedOutput", "actualOutput", "error", "executionTime"]:
        assert field in result
    assert result["executionTime"] >= 0
    if result["error"] is not None:
        assert result["actualOutput"] is None


# Common Test Doubles
@pytest.fixture
def mock_async_session():
    """Provide a reusable AsyncSession-like test double.

    - `add` is a `MagicMock` (synchronous)
    - `flush`, `commit`, `refresh`, `execute`, `get` are `AsyncMock`
    Tests can override `execute.return_value` / `get.return_value` as needed.
    """
    session = AsyncMock()

    # `add` is synchronous on SQLAlchemy session
    session.add = MagicMock()

    # Async methods
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.refresh = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()

    return session
