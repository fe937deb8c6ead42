class ExecutionError(Exception):
    """Base class for failures of a single test case execution."""


class ExecutionTimeoutError(ExecutionError):
    """Raised when a submission exceeds the per-case wall-clock bound."""

    def __init__(self, timeout_ms: int):
        self.timeout_ms = timeout_ms
        super().__init__(f"Execution timeout ({timeout_ms / 1000:g}s)")


class SubmissionRuntimeError(ExecutionError):
    """Raised when the submitted code throws or its interpreter exits non-zero."""


class OutputParseError(ExecutionError):
    """Raised when the produced output is not decodable as a structured value."""

    def __init__(self, raw_output: str):
        self.raw_output = raw_output
        super().__init__("Failed to parse output")


class RunnerUnavailableError(ExecutionError):
    """Raised when the interpreter process or sandbox cannot be created."""
