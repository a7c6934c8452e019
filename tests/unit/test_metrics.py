"""Tests for Prometheus metrics."""

from diffcritic.core.metrics import (
    REGISTRY,
    record_dropped_finding,
    record_github_api_call,
    record_llm_request,
    record_unit_outcome,
)


def sample(name: str, labels: dict[str, str] | None = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


class TestReviewMetrics:
    def test_unit_outcomes_counted_separately(self) -> None:
        ok_before = sample("diffcritic_review_units_total", {"outcome": "ok"})
        failed_before = sample("diffcritic_review_units_total", {"outcome": "failed"})

        record_unit_outcome("ok")
        record_unit_outcome("failed")
        record_unit_outcome("failed")

        assert sample("diffcritic_review_units_total", {"outcome": "ok"}) == ok_before + 1
        assert (
            sample("diffcritic_review_units_total", {"outcome": "failed"}) == failed_before + 2
        )

    def test_dropped_findings(self) -> None:
        labels = {"reason": "outside_hunk"}
        before = sample("diffcritic_review_findings_dropped_total", labels)

        record_dropped_finding("outside_hunk")

        assert sample("diffcritic_review_findings_dropped_total", labels) == before + 1


class TestLLMMetricsRecording:
    def test_record_llm_request_tokens(self) -> None:
        labels = {"provider": "openai", "model": "metrics-test", "direction": "input"}
        before = sample("diffcritic_llm_tokens_total", labels)

        record_llm_request(
            provider="openai",
            model="metrics-test",
            status="success",
            duration_seconds=1.5,
            tokens_input=100,
            tokens_output=20,
        )

        assert sample("diffcritic_llm_tokens_total", labels) == before + 100
        assert (
            sample(
                "diffcritic_llm_requests_total",
                {"provider": "openai", "model": "metrics-test", "status": "success"},
            )
            >= 1
        )


class TestGitHubMetricsRecording:
    def test_record_github_api_call(self) -> None:
        record_github_api_call(
            endpoint="pulls_reviews",
            method="POST",
            status_code=200,
            duration_seconds=0.3,
            rate_limit_remaining=4999,
            rate_limit_reset=0,
        )

        assert sample("diffcritic_github_rate_limit_remaining") == 4999
        assert sample("diffcritic_github_rate_limit_reset_seconds") == 0
