"""
Ordering Service — TMF622 リソーステンプレート
"""

from services.shared.identity import new_id, now_iso
from services.shared.normalizer import Fallback, RefSpec, ResourceTemplate

BASE_PATH = "productOrderingManagement/v4"
PRODUCT_INVENTORY_PATH = "productInventoryManagement/v4/product"

ORDER_ARRAYS = ("externalId", "channel", "note", "relatedParty", "payment")

PRODUCT = RefSpec(
    "Product",
    path=PRODUCT_INVENTORY_PATH,
    override_type=False,
    defaults={
        "id": Fallback(new_id),
        "isBundle": Fallback(False),
        "productCharacteristic": Fallback(list),
        "productRelationship": Fallback(list),
        "realizingResource": Fallback(list),
        "realizingService": Fallback(list),
        "relatedParty": Fallback(list),
    },
    many=False,
)

ORDER_ITEM = RefSpec(
    "ProductOrderItem",
    defaults={
        "id": Fallback(new_id),
        "quantity": Fallback(1),
        "action": Fallback("add"),
        "state": Fallback("acknowledged"),
        "productOrderItemRelationship": Fallback(list),
        "itemPrice": Fallback(list),
        "itemTerm": Fallback(list),
        "note": Fallback(list),
        "payment": Fallback(list),
    },
    nested={"product": PRODUCT},
)

PRODUCT_ORDER = ResourceTemplate(
    type_name="ProductOrder",
    path=f"{BASE_PATH}/productOrder",
    scalars={
        "category": Fallback("B2C product order"),
        "description": Fallback(""),
        "priority": Fallback("4"),
        "requestedStartDate": Fallback(now_iso),
        "requestedCompletionDate": Fallback(now_iso),
    },
    arrays=(*ORDER_ARRAYS, "productOrderItem"),
    refs={"productOrderItem": ORDER_ITEM},
)

CANCEL_PRODUCT_ORDER = ResourceTemplate(
    type_name="CancelProductOrder",
    path=f"{BASE_PATH}/cancelProductOrder",
    scalars={
        "cancellationReason": Fallback(""),
        "requestedCancellationDate": Fallback(now_iso),
        "productOrder": Fallback(dict),
    },
    refs={"productOrder": RefSpec("ProductOrderRef", "ProductOrder", many=False)},
)
