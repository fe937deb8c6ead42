"""
In-Process Sandbox Runner: evaluates JavaScript submissions inside an
embedded QuickJS interpreter.

Each test case gets a brand-new context with no host bindings, a time limit,
a memory cap and a stack cap. Evaluation happens on a dedicated
single-worker thread so submitted code never blocks the event loop. The
sandbox runs inside the serving process; there is no OS-level isolation
around it.

QuickJS measures its time limit in CPU time of the whole process. Only one
context evaluates at a time, so that budget is not split between concurrent
requests, and the elapsed wall-clock time of the evaluation is checked
against the timeout as well.
"""

import asyncio
import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import quickjs

from agentlogic.core.config import SANDBOX_MAX_STACK_BYTES, SANDBOX_MEMORY_LIMIT_BYTES, TEST_TIMEOUT_MS
from agentlogic.execution.comparator import outputs_match
from agentlogic.execution.entrypoint import detect_javascript_entrypoint
from agentlogic.execution.exceptions import (
    ExecutionError,
    ExecutionTimeoutError,
    RunnerUnavailableError,
    SubmissionRuntimeError,
)
from agentlogic.execution.process_runner import elapsed_ms
from agentlogic.schemas.test_execution import TestCase, TestResult

logger = logging.getLogger(__name__)

# Shared by every runner instance: one sandbox evaluates at a time
_sandbox_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="js-sandbox")


def build_sandbox_source(code: str, entrypoint: Optional[str], inputs: list) -> str:
    """
    Build the script evaluated for one test case.

    The result leaves the sandbox as the text of ``JSON.stringify``, so
    ``undefined`` and function values come back as no value at all rather
    than as ``null``.
    """
    if not entrypoint:
        # No callable found: the script's completion value is the result
        return f"JSON.stringify((0, eval)({json.dumps(code)}));"
    args = ", ".join(json.dumps(arg) for arg in inputs)
    return f"{code}\nJSON.stringify({entrypoint}({args}));"


class JavaScriptSandboxRunner:
    """Executes JavaScript submissions in a fresh QuickJS context per test case."""

    language = "javascript"
    backend = "sandbox"

    def __init__(
        self,
        timeout_ms: int = TEST_TIMEOUT_MS,
        memory_limit: int = SANDBOX_MEMORY_LIMIT_BYTES,
        max_stack_size: int = SANDBOX_MAX_STACK_BYTES,
    ):
        self.timeout_ms = timeout_ms
        self.memory_limit = memory_limit
        self.max_stack_size = max_stack_size

    async def execute(self, code: str, test_case: TestCase, function_name: Optional[str] = None) -> TestResult:
        started = time.monotonic()
        source = build_sandbox_source(code, detect_javascript_entrypoint(code, function_name), test_case.input)

        loop = asyncio.get_running_loop()
        try:
            encoded = await loop.run_in_executor(_sandbox_executor, self._evaluate, source)
        except ExecutionError as e:
            return TestResult.failure(test_case, str(e), elapsed_ms(started))

        if encoded is None:
            # undefined, a function or a symbol: nothing JSON can express
            return TestResult.success(test_case, None, False, elapsed_ms(started))

        actual = json.loads(encoded)
        passed = outputs_match(actual, test_case.expected_output)
        return TestResult.success(test_case, actual, passed, elapsed_ms(started))

    def _new_context(self) -> quickjs.Context:
        try:
            context = quickjs.Context()
            context.set_time_limit(self.timeout_ms / 1000)
            context.set_memory_limit(self.memory_limit)
            context.set_max_stack_size(self.max_stack_size)
        except Exception as e:
            logger.warning("Failed to create JavaScript sandbox", extra={"error": str(e)})
            raise RunnerUnavailableError(f"Could not create JavaScript sandbox: {e}") from e
        return context

    def _evaluate(self, source: str) -> Optional[str]:
        # Runs on the sandbox thread; the context never leaves it
        context = self._new_context()
        started = time.monotonic()
        try:
            encoded = context.eval(source)
        except quickjs.JSException as e:
            message = str(e).strip().splitlines()[0] if str(e).strip() else "Execution error"
            if "interrupted" in message:
                logger.warning("JavaScript execution timed out", extra={"timeout_ms": self.timeout_ms})
                raise ExecutionTimeoutError(self.timeout_ms) from None
            raise SubmissionRuntimeError(message) from None
        except MemoryError:
            raise SubmissionRuntimeError("Memory limit exceeded") from None

        if elapsed_ms(started) >= self.timeout_ms:
            logger.warning("JavaScript execution exceeded wall-clock timeout", extra={"timeout_ms": self.timeout_ms})
            raise ExecutionTimeoutError(self.timeout_ms)
        return encoded
