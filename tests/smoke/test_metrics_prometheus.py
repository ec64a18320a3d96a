import uuid

from docintel.observability.metrics import MetricsRegistry


def test_prometheus_render_contains_counter_and_timer():
    registry = MetricsRegistry()
    suffix = uuid.uuid4().hex[:8]
    counter_name = f"test_counter_{suffix}"
    timer_name = f"test_timer_{suffix}"

    registry.inc(counter_name, endpoint="/test")
    registry.observe_ms(timer_name, 12.5, endpoint="/test")

    body = registry.render_prometheus()
    assert f"# TYPE {counter_name} counter" in body
    assert f'{counter_name}{{endpoint="/test"}} 1' in body
    assert f"# TYPE {timer_name}_count counter" in body
    assert f'{timer_name}_sum{{endpoint="/test"}} 12.5' in body


def test_metric_names_are_sanitized():
    registry = MetricsRegistry()
    registry.inc("9 bad-name", path='/a"b')

    body = registry.render_prometheus()
    assert 'metric_9_bad_name{path="/a\\"b"} 1' in body
    assert registry.counter_value("9 bad-name", path='/a"b') == 1


def test_snapshot_and_reset():
    registry = MetricsRegistry()
    registry.observe_ms("upstream_ms", 10, engine="qwen")
    registry.observe_ms("upstream_ms", 30, engine="qwen")

    timer = registry.snapshot()["timers"]["upstream_ms"]['{engine="qwen"}']
    assert timer == {"count": 2, "total_ms": 40.0, "avg_ms": 20.0, "max_ms": 30.0}

    registry.reset()
    assert registry.render_prometheus() == ""


def test_metrics_endpoint_exposed(client):
    client.get("/health")
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "text/plain" in response.headers.get("content-type", "")
    assert "http_requests_total" in response.text
