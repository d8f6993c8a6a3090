"""
Prometheus Metrics Module

Provides instrumentation for the tally service:
- Votes recorded and rejected
- API request count and latency
- Store size
- Error tracking

Usage:
    from server.metrics import metrics
    metrics.votes_submitted.inc()
    metrics.record_error("store", exc)
"""

from prometheus_client import Counter, Histogram, Gauge, generate_latest, REGISTRY


class TallyMetrics:
    """Centralized metrics for the tally API"""

    def __init__(self):
        # Vote metrics
        self.votes_submitted = Counter(
            'votetally_votes_submitted_total',
            'Total votes recorded'
        )

        self.votes_rejected = Counter(
            'votetally_votes_rejected_total',
            'Votes rejected by validation',
            ['field']
        )

        self.queries = Counter(
            'votetally_queries_total',
            'Read operations by kind',
            ['kind']  # tally, subject, graph
        )

        # Store gauges, refreshed on /metrics and /api/health
        self.store_subjects = Gauge(
            'votetally_store_subjects',
            'Subjects currently held in the tally store'
        )

        self.store_votes = Gauge(
            'votetally_store_votes',
            'Votes currently held in the tally store'
        )

        # API metrics
        self.api_requests = Counter(
            'votetally_api_requests_total',
            'Total API requests',
            ['endpoint', 'method', 'status_code']
        )

        self.api_request_duration = Histogram(
            'votetally_api_request_duration_seconds',
            'API request duration',
            ['endpoint', 'method'],
            buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0]
        )

        # Error metrics
        self.errors = Counter(
            'votetally_errors_total',
            'Total errors by component and type',
            ['component', 'error_type']
        )

    def update_store_sizes(self, stats: dict):
        """Update store gauges from TallyStore.stats()"""
        self.store_subjects.set(stats.get("subject_count", 0))
        self.store_votes.set(stats.get("total_votes", 0))

    def record_error(self, component: str, error: Exception):
        """Record an error

        Args:
            component: Component name (store/api)
            error: Exception instance
        """
        error_type = type(error).__name__
        self.errors.labels(component=component, error_type=error_type).inc()


# Global metrics instance
metrics = TallyMetrics()


def get_metrics_text() -> str:
    """Get Prometheus metrics in text format

    Returns:
        Metrics text suitable for /metrics endpoint
    """
    return generate_latest(REGISTRY).decode('utf-8')
