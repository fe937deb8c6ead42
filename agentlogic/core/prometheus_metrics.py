import logging

from prometheus_client import Counter, Histogram, Info, generate_latest
from prometheus_client.core import CollectorRegistry

logger = logging.getLogger(__name__)

# Prometheus Registry
REGISTRY = CollectorRegistry()

# Execution Metrics
test_batches_total = Counter(
    'agentlogic_test_batches_total',
    'Total test batches executed',
    ['language', 'status'],
    registry=REGISTRY
)

test_cases_total = Counter(
    'agentlogic_test_cases_total',
    'Total test cases executed, by outcome',
    ['language', 'outcome'],
    registry=REGISTRY
)

test_case_duration_seconds = Histogram(
    'agentlogic_test_case_duration_seconds',
    'Wall-clock duration of a single test case execution',
    ['language'],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0],
    registry=REGISTRY
)

# Guardrails
rate_limit_exceeded_total = Counter(
    'agentlogic_rate_limit_exceeded_total',
    'Total rate limit violations',
    ['endpoint'],
    registry=REGISTRY
)

system_info = Info(
    'agentlogic_info',
    'System information',
    registry=REGISTRY
)


class PrometheusMetricsCollector:
    """Records test execution metrics into the service registry"""

    def __init__(self):
        system_info.info({
            'version': '1.0.0',
            'service': 'agentlogic-test-execution'
        })

    def record_test_case(self, language: str, outcome: str, duration_ms: int):
        """Record one executed test case. Outcome is passed, failed, error or timeout."""
        test_cases_total.labels(language=language, outcome=outcome).inc()
        test_case_duration_seconds.labels(language=language).observe(duration_ms / 1000)

    def record_batch(self, language: str, all_passed: bool):
        status = 'passed' if all_passed else 'failed'
        test_batches_total.labels(language=language, status=status).inc()

    def record_rate_limit_exceeded(self, endpoint: str):
        rate_limit_exceeded_total.labels(endpoint=endpoint).inc()

    def get_prometheus_metrics(self) -> bytes:
        """Get Prometheus metrics in text format"""
        return generate_latest(REGISTRY)


# Global instance
prometheus_collector = PrometheusMetricsCollector()
