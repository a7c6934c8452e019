"""
Prometheus metrics for diffcritic.

This module provides:
- LLM metrics (request count, latency, tokens per model)
- Review unit metrics (outcome per hunk, dropped findings, submitted comments)
- GitHub API metrics (request count, latency, rate limit)

The action is a short-lived batch job, so metrics live in a dedicated
registry that can be pushed to a Pushgateway at the end of a run.
"""

import time

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, push_to_gateway

REGISTRY = CollectorRegistry()

# =============================================================================
# LLM Metrics
# =============================================================================

LLM_REQUESTS_TOTAL = Counter(
    "diffcritic_llm_requests_total",
    "Total number of completion requests",
    ["provider", "model", "status"],  # status: success, error
    registry=REGISTRY,
)

LLM_TOKENS_TOTAL = Counter(
    "diffcritic_llm_tokens_total",
    "Total number of tokens processed",
    ["provider", "model", "direction"],  # direction: input, output
    registry=REGISTRY,
)

LLM_REQUEST_DURATION_SECONDS = Histogram(
    "diffcritic_llm_request_duration_seconds",
    "Completion request duration in seconds",
    ["provider", "model"],
    buckets=(0.5, 1.0, 2.5, 5.0, 10.0, 25.0, 50.0, 100.0),
    registry=REGISTRY,
)

# =============================================================================
# Review Metrics
# =============================================================================

REVIEW_UNITS_TOTAL = Counter(
    "diffcritic_review_units_total",
    "Number of (file, hunk) units sent for review",
    ["outcome"],  # outcome: ok, failed
    registry=REGISTRY,
)

REVIEW_FINDINGS_DROPPED_TOTAL = Counter(
    "diffcritic_review_findings_dropped_total",
    "Findings discarded before submission",
    ["reason"],  # reason: invalid_line, outside_hunk
    registry=REGISTRY,
)

REVIEW_COMMENTS_SUBMITTED_TOTAL = Counter(
    "diffcritic_review_comments_submitted_total",
    "Inline comments included in submitted reviews",
    registry=REGISTRY,
)

# =============================================================================
# GitHub API Metrics
# =============================================================================

GITHUB_API_REQUESTS_TOTAL = Counter(
    "diffcritic_github_api_requests_total",
    "Total number of GitHub API requests",
    ["endpoint", "method", "status_code"],
    registry=REGISTRY,
)

GITHUB_API_DURATION_SECONDS = Histogram(
    "diffcritic_github_api_duration_seconds",
    "GitHub API request duration in seconds",
    ["endpoint", "method"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
    registry=REGISTRY,
)

GITHUB_RATE_LIMIT_REMAINING = Gauge(
    "diffcritic_github_rate_limit_remaining",
    "Remaining GitHub API rate limit",
    registry=REGISTRY,
)

GITHUB_RATE_LIMIT_RESET_SECONDS = Gauge(
    "diffcritic_github_rate_limit_reset_seconds",
    "Seconds until GitHub rate limit resets",
    registry=REGISTRY,
)


# =============================================================================
# Helper Functions
# =============================================================================


def record_llm_request(
    provider: str,
    model: str,
    status: str,
    duration_seconds: float,
    tokens_input: int = 0,
    tokens_output: int = 0,
) -> None:
    """
    Record metrics for a completion request.

    Args:
        provider: Provider name (openai)
        model: Model identifier
        status: Request status (success, error)
        duration_seconds: Request duration
        tokens_input: Number of prompt tokens
        tokens_output: Number of completion tokens
    """
    LLM_REQUESTS_TOTAL.labels(provider=provider, model=model, status=status).inc()
    LLM_REQUEST_DURATION_SECONDS.labels(provider=provider, model=model).observe(
        duration_seconds
    )

    if tokens_input > 0:
        LLM_TOKENS_TOTAL.labels(provider=provider, model=model, direction="input").inc(
            tokens_input
        )

    if tokens_output > 0:
        LLM_TOKENS_TOTAL.labels(provider=provider, model=model, direction="output").inc(
            tokens_output
        )


def record_unit_outcome(outcome: str) -> None:
    """Count a reviewed unit by outcome (ok, failed)."""
    REVIEW_UNITS_TOTAL.labels(outcome=outcome).inc()


def record_dropped_finding(reason: str) -> None:
    """Count a finding discarded before submission."""
    REVIEW_FINDINGS_DROPPED_TOTAL.labels(reason=reason).inc()


def record_review_submitted(comment_count: int) -> None:
    REVIEW_COMMENTS_SUBMITTED_TOTAL.inc(comment_count)


def record_github_api_call(
    endpoint: str,
    method: str,
    status_code: int,
    duration_seconds: float,
    rate_limit_remaining: int | None = None,
    rate_limit_reset: int | None = None,
) -> None:
    """
    Record metrics for a GitHub API call.

    Args:
        endpoint: API endpoint (e.g., "pulls", "compare", "pulls_reviews")
        method: HTTP method
        status_code: Response status code
        duration_seconds: Request duration
        rate_limit_remaining: Remaining rate limit (if available)
        rate_limit_reset: Rate limit reset timestamp (if available)
    """
    GITHUB_API_REQUESTS_TOTAL.labels(
        endpoint=endpoint,
        method=method,
        status_code=str(status_code),
    ).inc()

    GITHUB_API_DURATION_SECONDS.labels(endpoint=endpoint, method=method).observe(
        duration_seconds
    )

    if rate_limit_remaining is not None:
        GITHUB_RATE_LIMIT_REMAINING.set(rate_limit_remaining)

    if rate_limit_reset is not None:
        reset_in_seconds = max(0, rate_limit_reset - int(time.time()))
        GITHUB_RATE_LIMIT_RESET_SECONDS.set(reset_in_seconds)


def push_metrics(gateway_url: str, job: str = "diffcritic") -> None:
    """Push the run's metrics to a Prometheus Pushgateway."""
    push_to_gateway(gateway_url, job=job, registry=REGISTRY)
