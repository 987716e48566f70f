import pytest

from services.catalog.app.templates import CATALOG, CATEGORY, PRODUCT_OFFERING, TEMPLATES
from services.configuration.app.templates import CHECK_PRODUCT_CONFIGURATION
from services.event.app.templates import EVENT
from services.inventory.app.templates import PRODUCT
from services.ordering.app.templates import CANCEL_PRODUCT_ORDER, PRODUCT_ORDER
from services.shared.normalizer import (
    Fallback,
    Missing,
    RefSpec,
    ResourceTemplate,
    normalize,
    normalize_update,
)

OFFERING_INPUT = {
    "id": "po-1",
    "name": "Fibre 100",
    "category": [{"id": "7"}, {"name": "Broadband"}],
    "allowedAction": [{"action": "add", "channel": [{"id": "web"}]}],
    "productOfferingTerm": [{"name": "12 months"}],
    "productSpecification": {"id": "spec-9"},
    "serviceLevelAgreement": {},
    "customAttributes": [{"key": "colour", "value": "red"}],
}

ORDER_INPUT = {
    "id": "o-1",
    "productOrderItem": [
        {"id": "1", "product": {"name": "Router"}},
        {"quantity": 3, "action": "modify"},
    ],
}


@pytest.mark.parametrize(
    "template, raw",
    [
        (CATEGORY, {"id": "c-1"}),
        (CATALOG, {"id": "cat-1", "category": [{"id": "1"}], "relatedParty": [{"role": "owner"}]}),
        (PRODUCT_OFFERING, OFFERING_INPUT),
        (PRODUCT_ORDER, ORDER_INPUT),
        (CANCEL_PRODUCT_ORDER, {"id": "x", "productOrder": {"id": "o-1"}}),
        (PRODUCT, {"id": "prod-1", "productSpecification": {"id": "1"}}),
        (EVENT, {"id": "e-1", "eventType": "Test", "event": {}}),
        (CHECK_PRODUCT_CONFIGURATION, {"id": "c", "checkProductConfigurationItem": [{"id": "1"}]}),
    ],
)
def test_normalize_is_idempotent(template, raw):
    once = normalize(raw, template)
    assert normalize(once, template) == once


def test_every_catalog_template_forces_its_type():
    for template in TEMPLATES.values():
        result = normalize({"@type": "Something", "id": "1"}, template)
        assert result["@type"] == template.type_name
        assert next(iter(result)) == "@type"


def test_fallback_replaces_falsy_but_missing_only_absent():
    template = ResourceTemplate(
        type_name="Thing",
        path="things",
        scalars={"name": Fallback("Default"), "visible": Missing(True)},
    )
    assert normalize({"name": "", "visible": False}, template) == {
        "@type": "Thing",
        "name": "Default",
        "visible": False,
    }
    assert normalize({"visible": None}, template)["visible"] is True


def test_callable_defaults_are_evaluated_per_call():
    counter = iter(range(10))
    template = ResourceTemplate(
        type_name="Thing", path="things", scalars={"seq": Fallback(lambda: next(counter) + 1)}
    )
    assert normalize({}, template)["seq"] == 1
    assert normalize({}, template)["seq"] == 2


def test_reference_arrays_are_tagged_with_synthesized_locator():
    result = normalize(OFFERING_INPUT, PRODUCT_OFFERING)

    first, second = result["category"]
    assert first["@type"] == "CategoryRef"
    assert first["@referredType"] == "Category"
    assert first["href"] == "http://localhost:3000/productCatalogManagement/v5/category/7"
    assert first["name"] == "Default Category"
    assert second["id"] == "1"
    assert second["name"] == "Broadband"

    channel = result["allowedAction"][0]["channel"][0]
    assert channel["@type"] == "ChannelRef"
    assert channel["href"].endswith("/salesChannelManagement/v5/channel/web")

    assert result["productOfferingTerm"][0]["duration"] == {"amount": 12, "units": "Month"}
    assert result["productSpecification"]["@type"] == "ProductSpecificationRef"
    assert result["productSpecification"]["name"] == "Default Spec"


def test_required_arrays_default_to_empty_and_unknown_fields_pass_through():
    result = normalize(OFFERING_INPUT, PRODUCT_OFFERING)
    assert result["agreement"] == []
    assert result["productOfferingPrice"] == []
    assert result["customAttributes"] == [{"key": "colour", "value": "red"}]
    assert result["isSellable"] is True


def test_empty_service_level_agreement_is_dropped():
    assert "serviceLevelAgreement" not in normalize(OFFERING_INPUT, PRODUCT_OFFERING)

    with_sla = normalize({**OFFERING_INPUT, "serviceLevelAgreement": {"name": "Gold"}}, PRODUCT_OFFERING)
    assert with_sla["serviceLevelAgreement"]["@type"] == "ServiceLevelAgreementRef"
    assert with_sla["serviceLevelAgreement"]["id"] == "1"


def test_order_items_get_defaults_and_product_locator():
    result = normalize(ORDER_INPUT, PRODUCT_ORDER)
    first, second = result["productOrderItem"]

    assert first["@type"] == "ProductOrderItem"
    assert first["id"] == "1"
    assert first["quantity"] == 1
    assert first["action"] == "add"
    assert first["state"] == "acknowledged"
    assert first["itemPrice"] == []
    assert first["product"]["@type"] == "Product"
    assert first["product"]["isBundle"] is False
    assert first["product"]["href"] == (
        "http://localhost:3000/productInventoryManagement/v4/product/" + first["product"]["id"]
    )

    assert second["id"]
    assert second["quantity"] == 3
    assert second["action"] == "modify"
    assert "product" not in second


def test_non_dict_reference_elements_are_left_alone():
    spec = RefSpec("CategoryRef", "Category", path="categories")
    assert spec.tag("plain") == "plain"


def test_normalize_does_not_mutate_input():
    raw = {"id": "po-1", "category": [{"id": "7"}]}
    normalize(raw, PRODUCT_OFFERING)
    assert raw == {"id": "po-1", "category": [{"id": "7"}]}


def test_normalize_update_keeps_identity_and_creation_date():
    existing = normalize(
        {"id": "prod-1", "href": "http://x/prod-1", "creationDate": "2024-01-01T00:00:00.000Z"},
        PRODUCT,
    )
    updated = normalize_update(
        existing,
        {"id": "other", "href": "elsewhere", "creationDate": "2030-01-01", "status": "active"},
        PRODUCT,
    )
    assert updated["id"] == "prod-1"
    assert updated["href"] == "http://x/prod-1"
    assert updated["creationDate"] == "2024-01-01T00:00:00.000Z"
    assert updated["status"] == "active"
    assert updated["@type"] == "Product"
