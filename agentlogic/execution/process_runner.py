"""
Process Invoker: runs one test case of a Python submission in a freshly
spawned interpreter process.

The submission is embedded in a short driver script that decodes the test
inputs, calls the entry point and prints the JSON-encoded result as its last
line of output. Failures inside the submission are written to stderr as
`{"error": "..."}` with exit status 1. Every test case gets its own process;
nothing is pooled or reused.
"""

import asyncio
import json
import logging
import time
from typing import Any, List, Optional

from agentlogic.core.config import PYTHON_EXECUTABLE, TEST_TIMEOUT_MS
from agentlogic.execution.comparator import outputs_match
from agentlogic.execution.entrypoint import detect_python_entrypoint
from agentlogic.execution.exceptions import (
    ExecutionError,
    ExecutionTimeoutError,
    OutputParseError,
    RunnerUnavailableError,
    SubmissionRuntimeError,
)
from agentlogic.schemas.test_execution import TestCase, TestResult

logger = logging.getLogger(__name__)

MAX_ERROR_LENGTH = 2000

DRIVER_TEMPLATE = """\
import json
import sys

{code}

_args = json.loads({args_literal})
try:
    _result = {entrypoint}(*_args)
    print(json.dumps(_result))
except Exception as e:
    print(json.dumps({{"error": str(e)}}), file=sys.stderr)
    sys.exit(1)
"""


def build_driver_script(code: str, entrypoint: str, inputs: List[Any]) -> str:
    # Inputs travel as one JSON string literal so true/false/null decode correctly
    return DRIVER_TEMPLATE.format(
        code=code,
        args_literal=repr(json.dumps(inputs)),
        entrypoint=entrypoint,
    )


def elapsed_ms(started: float) -> int:
    return max(0, int((time.monotonic() - started) * 1000))


class PythonProcessRunner:
    """Executes Python submissions in an external interpreter, one process per test case."""

    language = "python"
    backend = "process"

    def __init__(self, executable: str = PYTHON_EXECUTABLE, timeout_ms: int = TEST_TIMEOUT_MS):
        self.executable = executable
        self.timeout_ms = timeout_ms

    async def execute(self, code: str, test_case: TestCase, function_name: Optional[str] = None) -> TestResult:
        started = time.monotonic()
        try:
            actual = await self._run(code, test_case, function_name)
        except OutputParseError as e:
            return TestResult.failure(test_case, str(e), elapsed_ms(started), raw_output=e.raw_output)
        except ExecutionError as e:
            return TestResult.failure(test_case, str(e), elapsed_ms(started))

        passed = outputs_match(actual, test_case.expected_output)
        return TestResult.success(test_case, actual, passed, elapsed_ms(started))

    async def _run(self, code: str, test_case: TestCase, function_name: Optional[str]) -> Any:
        entrypoint = detect_python_entrypoint(code, function_name)
        script = build_driver_script(code, entrypoint, test_case.input)

        try:
            process = await asyncio.create_subprocess_exec(
                # -I: ignore PYTHON* env vars and user site-packages
                self.executable, "-I", "-X", "utf8", "-c", script,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.warning("Failed to spawn Python interpreter", extra={"executable": self.executable, "error": str(e)})
            raise RunnerUnavailableError(f"Could not start Python interpreter: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout_ms / 1000)
        except asyncio.TimeoutError:
            logger.warning("Python execution timed out", extra={"timeout_ms": self.timeout_ms, "pid": process.pid})
            raise ExecutionTimeoutError(self.timeout_ms) from None
        finally:
            if process.returncode is None:
                try:
                    process.kill()
                except ProcessLookupError:
                    pass
                await process.wait()

        stdout_text = stdout.decode("utf-8", errors="replace")
        stderr_text = stderr.decode("utf-8", errors="replace")

        if process.returncode != 0:
            raise SubmissionRuntimeError(self._error_message(stderr_text))

        return self._parse_output(stdout_text)

    @staticmethod
    def _error_message(stderr_text: str) -> str:
        stripped = stderr_text.strip()
        if not stripped:
            return "Python execution error"

        # The driver reports exceptions from the entry point as a JSON object
        last_line = stripped.splitlines()[-1]
        try:
            payload = json.loads(last_line)
        except ValueError:
            payload = None
        if isinstance(payload, dict) and "error" in payload:
            return str(payload["error"]) or "Python execution error"

        return stripped[-MAX_ERROR_LENGTH:]

    @staticmethod
    def _parse_output(stdout_text: str) -> Any:
        lines = [line for line in stdout_text.splitlines() if line.strip()]
        if not lines:
            raise OutputParseError(stdout_text.strip())
        try:
            return json.loads(lines[-1])
        except ValueError:
            raise OutputParseError(stdout_text.strip()) from None
