import queue
import threading

import pytest

from pickleball.models.notification import EventType
from pickleball.models.tournament_model import TournamentModel
from pickleball.services.notification_service import NotificationService
from pickleball.store.base import EntityKind


@pytest.fixture
def service():
    return NotificationService(queue_size=2)


def _tournament(name="Fall Classic"):
    return TournamentModel(name=name)


class TestNotificationService:

    def test_publish_reaches_matching_subscriber(self, service):
        record = _tournament()
        with service.subscribe(EntityKind.TOURNAMENT, id=record.id) as subscription:
            delivered = service.publish(EventType.INSERT, EntityKind.TOURNAMENT, record)
            event = subscription.get(timeout=1)
        assert delivered == 1
        assert event.event_type == "insert"
        assert event.kind == "tournament"
        assert event.record["name"] == "Fall Classic"

    def test_filters_and_kind_narrow_delivery(self, service):
        wanted, other = _tournament("A"), _tournament("B")
        narrow = service.subscribe(EntityKind.TOURNAMENT, id=wanted.id)
        wrong_kind = service.subscribe(EntityKind.MATCH)

        service.publish(EventType.UPDATE, EntityKind.TOURNAMENT, other)
        service.publish(EventType.UPDATE, EntityKind.TOURNAMENT, wanted)

        assert [e.record["name"] for e in narrow.drain()] == ["A"]
        assert wrong_kind.drain() == []

    def test_publish_without_subscribers(self, service):
        assert service.publish(EventType.DELETE, EntityKind.TOURNAMENT, _tournament()) == 0

    def test_full_queue_drops_instead_of_blocking(self, service):
        subscription = service.subscribe(EntityKind.TOURNAMENT)
        for n in range(5):
            service.publish(EventType.INSERT, EntityKind.TOURNAMENT, _tournament(f"T{n}"))
        assert subscription.dropped == 3
        assert [e.record["name"] for e in subscription.drain()] == ["T0", "T1"]

    def test_failing_subscriber_does_not_affect_others(self, service):
        broken = service.subscribe(EntityKind.TOURNAMENT)
        healthy = service.subscribe(EntityKind.TOURNAMENT)

        def explode(event):
            raise RuntimeError("observer crashed")

        broken.deliver = explode
        assert service.publish(EventType.INSERT, EntityKind.TOURNAMENT, _tournament()) == 1
        assert len(healthy.drain()) == 1

    def test_unserializable_record_is_logged_not_raised(self, service, caplog):
        service.subscribe(EntityKind.TOURNAMENT)
        assert service.publish(EventType.INSERT, EntityKind.TOURNAMENT, object()) == 0
        assert "Could not build change event" in caplog.text

    def test_close_unsubscribes_and_ends_iteration(self, service):
        subscription = service.subscribe(EntityKind.TOURNAMENT)
        received = []
        consumer = threading.Thread(target=lambda: received.extend(subscription))
        consumer.start()

        service.publish(EventType.INSERT, EntityKind.TOURNAMENT, _tournament())
        subscription.close()
        consumer.join(timeout=2)

        assert not consumer.is_alive()
        assert len(received) == 1
        assert service.subscriber_count == 0

    def test_get_times_out(self, service):
        subscription = service.subscribe(EntityKind.TOURNAMENT)
        with pytest.raises(queue.Empty):
            subscription.get(timeout=0.01)
