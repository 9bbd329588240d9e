"""
Alert Emitter Component Tests

Usage:
    pytest tests/component/delay_detection/test_alert_emitter_component.py -v
"""
import pytest

from microservices.delay_detection_service.alert_emitter import AlertEmitter
from microservices.delay_detection_service.events import DelayEventType
from microservices.delay_detection_service.models import AlertPriority, DelaySeverity

pytestmark = [pytest.mark.component]


def _delayed(factory, delay_days, severity, factors=None):
    return factory.make_analysis(
        is_delayed=True,
        delay_days=delay_days,
        delay_severity=severity,
        factors=factors or [],
    )


@pytest.fixture
def emitter(service):
    return service.alert_emitter


class TestBuildAlert:

    @pytest.mark.parametrize("delay_days,severity,priority", [
        (1, DelaySeverity.WARNING, AlertPriority.NORMAL),
        (4, DelaySeverity.CRITICAL, AlertPriority.HIGH),
        (8, DelaySeverity.URGENT, AlertPriority.URGENT),
    ])
    def test_priority_from_severity(self, emitter, factory, delay_days, severity, priority):
        alert = emitter.build_alert(_delayed(factory, delay_days, severity))
        assert alert.priority == priority

    def test_title_and_message(self, emitter, factory):
        analysis = _delayed(
            factory, 4, DelaySeverity.CRITICAL,
            factors=["Exception or delay reported by carrier", "No movement for 5 days"],
        )

        alert = emitter.build_alert(analysis)

        assert alert.title == "Order delayed - 4 days"
        assert alert.message == (
            f"Order with tracking code {analysis.tracking_code} is 4 days late. "
            "Exception or delay reported by carrier. No movement for 5 days"
        )
        assert alert.alert_type == "delay_warning"
        assert alert.is_read is False
        assert alert.created_at == factory.now

    def test_message_without_factors(self, emitter, factory):
        analysis = _delayed(factory, 2, DelaySeverity.WARNING)

        alert = emitter.build_alert(analysis)

        assert alert.message == f"Order with tracking code {analysis.tracking_code} is 2 days late."

    def test_metadata_carries_analysis(self, emitter, factory):
        analysis = _delayed(factory, 4, DelaySeverity.CRITICAL, factors=["No movement for 5 days"])

        metadata = emitter.build_alert(analysis).metadata

        assert metadata["tracking_code"] == analysis.tracking_code
        assert metadata["carrier"] == "correios"
        assert metadata["delay_days"] == 4
        assert metadata["delay_severity"] == "critical"
        assert metadata["factors"] == ["No movement for 5 days"]
        assert metadata["predicted_delivery"] == analysis.predicted_delivery.isoformat()
        assert metadata["confidence"] == 70


@pytest.mark.asyncio
class TestEmit:

    async def test_stores_alert_and_publishes_event(self, emitter, alert_store, mock_event_bus, factory):
        analysis = _delayed(factory, 6, DelaySeverity.URGENT)

        assert await emitter.emit(analysis) is True

        assert len(alert_store.alerts) == 1
        assert alert_store.alerts[0].order_id == analysis.order_id
        mock_event_bus.assert_event_published(
            DelayEventType.ALERT_CREATED.value, {"order_id": analysis.order_id, "priority": "urgent"}
        )

    async def test_store_failure_is_swallowed(self, emitter, alert_store, mock_event_bus, factory):
        alert_store.set_failure()

        assert await emitter.emit(_delayed(factory, 3, DelaySeverity.CRITICAL)) is False

        assert alert_store.alerts == []
        mock_event_bus.assert_no_events_published()

    async def test_event_bus_failure_keeps_stored_alert(self, emitter, alert_store, mock_event_bus, factory):
        mock_event_bus.set_error(RuntimeError("nats down"))

        assert await emitter.emit(_delayed(factory, 3, DelaySeverity.CRITICAL)) is True
        assert len(alert_store.alerts) == 1

    async def test_without_event_bus(self, alert_store, factory):
        emitter = AlertEmitter(alert_store, clock=factory.clock())

        assert await emitter.emit(_delayed(factory, 3, DelaySeverity.CRITICAL)) is True
        assert len(alert_store.alerts) == 1
