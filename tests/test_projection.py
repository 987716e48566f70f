from services.shared.projection import parse_fields, project

ORDER = {
    "@type": "ProductOrder",
    "id": "o-1",
    "href": "http://localhost:3000/productOrderingManagement/v4/productOrder/o-1",
    "state": "acknowledged",
    "completionDate": None,
    "priority": "4",
}


def test_parse_fields_trims_and_drops_blanks():
    assert parse_fields(" state , ,priority,") == ["state", "priority"]
    assert parse_fields(None) == []
    assert parse_fields("") == []


def test_empty_field_list_is_identity():
    assert project(ORDER, []) == ORDER
    assert project(ORDER, None) == ORDER


def test_identity_triple_always_first():
    result = project(ORDER, ["state"])
    assert list(result) == ["@type", "id", "href", "state"]


def test_requested_null_field_is_kept_and_unknown_is_omitted():
    result = project(ORDER, ["completionDate", "doesNotExist"])
    assert result["completionDate"] is None
    assert "doesNotExist" not in result


def test_identity_fields_are_not_duplicated_when_requested():
    result = project(ORDER, ["id", "state", "@type"])
    assert list(result) == ["@type", "id", "href", "state"]


def test_always_fields_are_added_when_present():
    resource = {**ORDER, "productConfigurationSpecification": {"id": "s"}}
    result = project(resource, ["state"], always=("productConfigurationSpecification",))
    assert result["productConfigurationSpecification"] == {"id": "s"}
    assert "productConfigurationSpecification" not in project(ORDER, ["state"], always=("productConfigurationSpecification",))
