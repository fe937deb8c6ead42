import logging
import time
from typing import Dict, List, Optional, Protocol, Sequence

from agentlogic.core.config import MAX_CODE_LENGTH, MAX_TEST_CASES
from agentlogic.core.prometheus_metrics import prometheus_collector
from agentlogic.exceptions import ValidationError
from agentlogic.execution.process_runner import PythonProcessRunner, elapsed_ms
from agentlogic.execution.sandbox_runner import JavaScriptSandboxRunner
from agentlogic.schemas.test_execution import (
    SUPPORTED_LANGUAGES,
    Language,
    RunSummary,
    RunTestsRequest,
    RunTestsResponse,
    TestCase,
    TestResult,
)

logger = logging.getLogger(__name__)


class Runner(Protocol):
    language: str
    backend: str

    async def execute(self, code: str, test_case: TestCase, function_name: Optional[str] = None) -> TestResult:
        ...


def default_runners() -> Dict[Language, Runner]:
    return {
        Language.JAVASCRIPT: JavaScriptSandboxRunner(),
        Language.PYTHON: PythonProcessRunner(),
    }


def classify_outcome(result: TestResult) -> str:
    if result.passed:
        return "passed"
    if result.error and result.error.startswith("Execution timeout"):
        return "timeout"
    if result.error:
        return "error"
    return "failed"


class TestBatchOrchestrator:
    """
    Runs one submission against an ordered batch of test cases.

    Input is validated up front; a rejected batch never reaches a runner.
    Test cases are awaited one at a time, in input order, each in its own
    process or sandbox context. A failure in one case (including an
    exception escaping its runner) becomes that case's result and never stops
    the cases after it. Nothing is retried.
    """

    __test__ = False  # not a pytest class

    def __init__(
        self,
        runners: Optional[Dict[Language, Runner]] = None,
        max_code_length: int = MAX_CODE_LENGTH,
        max_test_cases: int = MAX_TEST_CASES,
    ):
        self.runners = runners if runners is not None else default_runners()
        self.max_code_length = max_code_length
        self.max_test_cases = max_test_cases

    def validate(self, code: Optional[str], test_cases: Optional[Sequence[TestCase]], language: Optional[str]) -> Language:
        """Check a batch before execution and return its resolved language."""
        if not code or test_cases is None or not language:
            raise ValidationError("Missing required fields: code, testCases, language")

        if not isinstance(test_cases, (list, tuple)) or len(test_cases) == 0:
            raise ValidationError("testCases must be a non-empty array", "testCases")

        resolved = Language.parse(language)
        if resolved is None or resolved not in self.runners:
            supported = ", ".join(lang for lang in SUPPORTED_LANGUAGES if Language(lang) in self.runners)
            raise ValidationError(f"Unsupported language. Currently supports: {supported}", "language")

        if len(code) > self.max_code_length:
            raise ValidationError(
                f"Code is too long (maximum {self.max_code_length} characters)", "code"
            )

        if len(test_cases) > self.max_test_cases:
            raise ValidationError(
                f"Too many test cases (maximum {self.max_test_cases})", "testCases"
            )

        return resolved

    async def run_batch(
        self,
        code: str,
        test_cases: Sequence[TestCase],
        language: Language,
        function_name: Optional[str] = None,
    ) -> List[TestResult]:
        runner = self.runners[language]
        results: List[TestResult] = []

        for index, test_case in enumerate(test_cases):
            started = time.monotonic()
            try:
                result = await runner.execute(code, test_case, function_name)
            except Exception as e:
                # Runner bug or infrastructure failure; keep going with the next case
                logger.exception("Test case crashed outside its runner", extra={"case_index": index, "language": language.value})
                result = TestResult.failure(test_case, str(e) or "Execution error", elapsed_ms(started))

            prometheus_collector.record_test_case(language.value, classify_outcome(result), result.execution_time)
            results.append(result)

        return results

    @staticmethod
    def summarize(results: List[TestResult]) -> RunSummary:
        return RunSummary.from_results(results)

    async def run(self, request: RunTestsRequest) -> RunTestsResponse:
        language = self.validate(request.code, request.test_cases, request.language)

        logger.info(
            f"Running tests for {language.value}",
            extra={"test_count": len(request.test_cases), "code_length": len(request.code)},
        )

        results = await self.run_batch(request.code, request.test_cases, language, request.function_name)
        summary = self.summarize(results)

        logger.info(
            "Test execution completed",
            extra={"passed": summary.passed, "total": summary.total, "success": summary.all_passed},
        )
        prometheus_collector.record_batch(language.value, summary.all_passed)

        return RunTestsResponse(success=True, results=results, summary=summary)
