"""
Event Service — TMF688 リソーステンプレート
"""

from services.shared.identity import new_id, now_iso
from services.shared.normalizer import Fallback, ResourceTemplate

BASE_PATH = "tmf-api/event/v4"

EVENT = ResourceTemplate(
    type_name="Event",
    path=f"{BASE_PATH}/event",
    scalars={
        "@baseType": Fallback("event"),
        "eventId": Fallback(new_id),
        "eventTime": Fallback(now_iso),
        "timeOccurred": Fallback(now_iso),
        "priority": Fallback("Normal"),
    },
    arrays=("relatedParty", "analyticCharacteristic"),
)

HUB = ResourceTemplate(
    type_name="Hub",
    path=f"{BASE_PATH}/hub",
    scalars={"@baseType": Fallback("hub")},
)

TOPIC = ResourceTemplate(
    type_name="Topic",
    path=f"{BASE_PATH}/topic",
    scalars={"@baseType": Fallback("topic")},
)
