from unittest.mock import AsyncMock, MagicMock

import pytest

from agentlogic.exceptions import ValidationError
from agentlogic.execution.orchestrator import TestBatchOrchestrator, classify_outcome
from agentlogic.schemas.test_execution import Language, RunTestsRequest, TestCase
from agentlogic.tests.conftest import make_result


def fake_runner(backend="fake", side_effect=None):
    runner = MagicMock()
    runner.backend = backend
    runner.execute = AsyncMock(side_effect=side_effect)
    return runner


def echo_runner():
    """Runner that passes every case whose expected output is truthy."""
    async def execute(code, test_case, function_name=None):
        return make_result(test_case, passed=bool(test_case.expected_output))
    return fake_runner(side_effect=execute)


def cases(*expected):
    return [TestCase(input=[i], expected_output=value) for i, value in enumerate(expected)]


@pytest.fixture
def runners():
    return {Language.JAVASCRIPT: echo_runner(), Language.PYTHON: echo_runner()}


class TestValidation:
    @pytest.mark.parametrize(
        "code, test_cases, language",
        [
            (None, cases(1), "python"),
            ("", cases(1), "python"),
            ("x", None, "python"),
            ("x", cases(1), None),
        ],
    )
    def test_missing_fields(self, runners, code, test_cases, language):
        orchestrator = TestBatchOrchestrator(runners=runners)
        with pytest.raises(ValidationError) as exc:
            orchestrator.validate(code, test_cases, language)
        assert exc.value.status_code == 400
        assert exc.value.detail["message"] == "Missing required fields: code, testCases, language"

    def test_empty_test_cases(self, runners):
        orchestrator = TestBatchOrchestrator(runners=runners)
        with pytest.raises(ValidationError) as exc:
            orchestrator.validate("x", [], "python")
        assert exc.value.detail["message"] == "testCases must be a non-empty array"

    def test_unsupported_language_lists_supported_set(self, runners):
        orchestrator = TestBatchOrchestrator(runners=runners)
        with pytest.raises(ValidationError) as exc:
            orchestrator.validate("x", cases(1), "ruby")
        assert exc.value.detail["message"] == "Unsupported language. Currently supports: javascript, python"

    def test_language_is_case_insensitive(self, runners):
        orchestrator = TestBatchOrchestrator(runners=runners)
        assert orchestrator.validate("x", cases(1), " JavaScript ") is Language.JAVASCRIPT

    def test_code_length_limit(self, runners):
        orchestrator = TestBatchOrchestrator(runners=runners, max_code_length=5)
        with pytest.raises(ValidationError) as exc:
            orchestrator.validate("x" * 6, cases(1), "python")
        assert exc.value.detail["field"] == "code"

    def test_test_case_count_limit(self, runners):
        orchestrator = TestBatchOrchestrator(runners=runners, max_test_cases=2)
        with pytest.raises(ValidationError) as exc:
            orchestrator.validate("x", cases(1, 2, 3), "python")
        assert exc.value.detail["field"] == "testCases"

    @pytest.mark.asyncio
    async def test_rejected_batch_never_reaches_a_runner(self, runners):
        orchestrator = TestBatchOrchestrator(runners=runners)
        with pytest.raises(ValidationError):
            await orchestrator.run(RunTestsRequest(code="def f(): pass", test_cases=[], language="python"))

        for runner in runners.values():
            runner.execute.assert_not_awaited()


class TestBatchExecution:
    @pytest.mark.asyncio
    async def test_results_follow_input_order(self, runners):
        orchestrator = TestBatchOrchestrator(runners=runners)
        test_cases = cases(1, 0, 2, 0, 3)

        results = await orchestrator.run_batch("code", test_cases, Language.PYTHON)

        assert len(results) == len(test_cases)
        for test_case, result in zip(test_cases, results):
            assert result.input == test_case.input
            assert result.expected_output == test_case.expected_output
        assert [r.passed for r in results] == [True, False, True, False, True]

    @pytest.mark.asyncio
    async def test_dispatches_to_language_runner(self, runners):
        orchestrator = TestBatchOrchestrator(runners=runners)

        await orchestrator.run_batch("code", cases(1, 2), Language.JAVASCRIPT, function_name="solve")

        assert runners[Language.JAVASCRIPT].execute.await_count == 2
        runners[Language.PYTHON].execute.assert_not_awaited()
        code, _, function_name = runners[Language.JAVASCRIPT].execute.await_args_list[0].args
        assert code == "code"
        assert function_name == "solve"

    @pytest.mark.asyncio
    async def test_crash_in_one_case_does_not_stop_the_batch(self):
        calls = []

        async def execute(code, test_case, function_name=None):
            calls.append(test_case.input[0])
            if test_case.input[0] == 1:
                raise RuntimeError("interpreter exploded")
            return make_result(test_case)

        runner = fake_runner(side_effect=execute)
        orchestrator = TestBatchOrchestrator(runners={Language.PYTHON: runner})

        results = await orchestrator.run_batch("code", cases(1, 1, 1), Language.PYTHON)

        assert calls == [0, 1, 2]
        assert [r.passed for r in results] == [True, False, True]
        assert results[1].error == "interpreter exploded"
        assert results[1].actual_output is None

    @pytest.mark.asyncio
    async def test_each_case_runs_exactly_once(self):
        runner = fake_runner(side_effect=lambda code, tc, fn=None: make_result(tc, error="boom"))
        orchestrator = TestBatchOrchestrator(runners={Language.PYTHON: runner})

        await orchestrator.run_batch("code", cases(1, 2), Language.PYTHON)

        assert runner.execute.await_count == 2

    @pytest.mark.asyncio
    async def test_run_builds_consistent_summary(self, runners):
        orchestrator = TestBatchOrchestrator(runners=runners)
        request = RunTestsRequest(code="code", test_cases=cases(1, 0, 1), language="python")

        response = await orchestrator.run(request)
        summary = response.summary

        assert response.success is True
        assert summary.total == len(response.results) == 3
        assert summary.passed == sum(1 for r in response.results if r.passed) == 2
        assert summary.failed == summary.total - summary.passed == 1
        assert summary.all_passed is False


def test_summary_all_passed():
    summary = TestBatchOrchestrator.summarize([make_result(tc) for tc in cases(1, 2)])
    assert summary.all_passed is True
    assert summary.failed == 0


@pytest.mark.parametrize(
    "error, passed, outcome",
    [
        (None, True, "passed"),
        (None, False, "failed"),
        ("Execution timeout (5s)", False, "timeout"),
        ("division by zero", False, "error"),
    ],
)
def test_classify_outcome(error, passed, outcome):
    result = make_result(TestCase(input=[], expected_output=1), passed=passed, error=error)
    assert classify_outcome(result) == outcome
