from services.metrics import NotificationMetrics


def test_get_metrics_empty():
    result = NotificationMetrics().get_metrics()

    assert result["total_runs"] == 0
    assert result["total_errors"] == 0
    assert result["error_rate"] == 0
    assert result["p50_latency_ms"] == 0
    assert result["avg_fresh_count"] == 0
    assert result["error_counts"] == {}


def test_record_derivation():
    metrics = NotificationMetrics()
    metrics.record_derivation(
        viewer_id="user1",
        fresh_count=4,
        merged_count=10,
        unread_count=3,
        duration_ms=12,
    )

    result = metrics.get_metrics()
    assert result["total_runs"] == 1
    assert result["avg_fresh_count"] == 4
    assert result["avg_unread_count"] == 3
    assert result["p50_latency_ms"] == 12


def test_get_metrics_with_multiple_runs():
    metrics = NotificationMetrics()
    metrics.record_derivation("user1", 2, 5, 1, 100)
    metrics.record_derivation("user2", 6, 8, 4, 150)

    result = metrics.get_metrics()
    assert result["total_runs"] == 2
    assert result["avg_fresh_count"] == 4
    assert result["avg_unread_count"] == 2.5
    assert result["p50_latency_ms"] == 150
    assert result["p95_latency_ms"] == 150


def test_error_rate_counts_against_runs():
    metrics = NotificationMetrics()
    metrics.record_derivation("user1", 1, 1, 1, 10)
    metrics.record_derivation("user2", 1, 1, 1, 10)
    metrics.record_error("INTERNAL", viewer_id="user1")

    result = metrics.get_metrics()
    assert result["total_errors"] == 1
    assert result["error_rate"] == 0.5
    assert result["error_counts"] == {"INTERNAL": 1}


def test_errors_without_runs_have_zero_rate():
    metrics = NotificationMetrics()
    metrics.record_error("INTERNAL")

    assert metrics.get_metrics()["error_rate"] == 0


def test_samples_are_bounded_by_window():
    metrics = NotificationMetrics(sample_window=3)
    for latency in [500, 400, 10, 20, 30]:
        metrics.record_derivation("user1", 1, 1, 1, latency)

    result = metrics.get_metrics()
    assert result["total_runs"] == 5
    assert result["p95_latency_ms"] == 30
    assert result["p50_latency_ms"] == 20
