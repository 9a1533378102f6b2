from orgdesk.observability.metrics import InMemoryMetrics


def test_metrics_snapshot_includes_latency_percentiles_and_counts():
    m = InMemoryMetrics(latency_window=10)

    m.observe_request("/api/health", 200, 12.0)
    m.observe_request("/api/health", 200, 24.0)
    m.observe_request("/api/rpc/createCourse", 500, 200.0)

    snap = m.snapshot()

    assert snap["requests_total"] == 3
    assert snap["status_counts"]["2xx"] == 2
    assert snap["status_counts"]["5xx"] == 1
    assert snap["path_counts"]["/api/health"] == 2
    assert snap["latency_ms"]["samples"] == 3
    assert snap["latency_ms"]["p95"] >= snap["latency_ms"]["p50"]


def test_metrics_count_operations_and_error_codes():
    m = InMemoryMetrics()

    m.observe_operation("createCourse")
    m.observe_operation("createCourse", "not_found")
    m.observe_operation("createOrganizationUser", "duplicate_membership")

    snap = m.snapshot()

    assert snap["operation_counts"] == {"createCourse": 2, "createOrganizationUser": 1}
    assert snap["error_counts"] == {"not_found": 1, "duplicate_membership": 1}


def test_empty_snapshot_has_zero_latency():
    snap = InMemoryMetrics().snapshot()

    assert snap["requests_total"] == 0
    assert snap["latency_ms"]["p99"] == 0.0
