import pytest
from fastapi.testclient import TestClient

from services.gateway.app.main import create_gateway
from services.shared.notifications import NotificationPublisher
from services.shared.store import StoreFactory


class RecordingPublisher(NotificationPublisher):
    """Redis を使わず、発行された通知を記録するだけの publisher"""

    def __init__(self) -> None:
        super().__init__(redis=None)
        self.published: list[tuple[str, dict]] = []

    async def publish(self, event_type, resource):
        self.published.append((event_type, resource))
        return None

    def types(self) -> list[str]:
        return [event_type for event_type, _ in self.published]


@pytest.fixture
def stores():
    return StoreFactory(database_url="")


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def client(stores, publisher):
    return TestClient(create_gateway(stores, publisher))
