"""Unit tests for provisioning call metrics."""

from unittest.mock import MagicMock, patch

import pytest
from prometheus_client import CollectorRegistry

from provlink.observability.config import MetricsConfig
from provlink.observability.metrics import MetricsCollector, MetricsRegistry


class TestMetricsRegistry:
    """Tests for MetricsRegistry."""

    def test_private_registries(self):
        """Test two registries never collide."""
        first = MetricsRegistry()
        second = MetricsRegistry()

        first.pa_calls_total.labels(method="EndorseCerts", code="OK").inc()

        assert first.registry is not second.registry
        assert second.registry.get_sample_value(
            "provlink_pa_calls_total", {"method": "EndorseCerts", "code": "OK"}
        ) is None

    def test_shared_registry(self):
        """Test an explicit registry is used."""
        registry = CollectorRegistry()

        assert MetricsRegistry(registry).registry is registry


class TestMetricsCollector:
    """Tests for MetricsCollector."""

    @pytest.fixture
    def collector(self):
        return MetricsCollector()

    def test_record_call(self, collector):
        """Test calls are counted per method and code."""
        collector.record_call("CreateKeyAndCert", "OK", 0.2)
        collector.record_call("CreateKeyAndCert", "OK", 0.3)
        collector.record_call("CreateKeyAndCert", "UNAVAILABLE", 0.01)

        assert collector.get_call_count("CreateKeyAndCert", "OK") == 2
        assert collector.get_call_count("CreateKeyAndCert", "UNAVAILABLE") == 1
        assert collector.get_call_count("EndorseCerts", "OK") == 0

    def test_duration_observed(self, collector):
        """Test durations reach the histogram."""
        collector.record_call("DeriveSymmetricKeys", "OK", 0.5)

        total = collector.registry.registry.get_sample_value(
            "provlink_pa_call_duration_seconds_sum", {"method": "DeriveSymmetricKeys"}
        )
        assert total == pytest.approx(0.5)

    def test_time_call(self, collector):
        """Test the timing context manager observes one sample."""
        with collector.time_call("EndorseCerts"):
            pass

        count = collector.registry.registry.get_sample_value(
            "provlink_pa_call_duration_seconds_count", {"method": "EndorseCerts"}
        )
        assert count == 1

    def test_start_disabled(self, collector):
        """Test no endpoint is served when disabled."""
        with patch(
            "provlink.observability.metrics.collector.start_http_server"
        ) as mock_start:
            collector.start()

        mock_start.assert_not_called()
        assert not collector.is_running

    def test_start_and_shutdown(self):
        """Test the HTTP endpoint is started and stopped."""
        collector = MetricsCollector(MetricsConfig(enabled=True, port=9999, addr="127.0.0.1"))
        server = MagicMock()

        with patch(
            "provlink.observability.metrics.collector.start_http_server",
            return_value=(server, MagicMock()),
        ) as mock_start:
            collector.start()
            collector.start()

        mock_start.assert_called_once_with(
            9999, addr="127.0.0.1", registry=collector.registry.registry
        )
        assert collector.is_running

        collector.shutdown()

        server.shutdown.assert_called_once()
        server.server_close.assert_called_once()
        assert not collector.is_running
