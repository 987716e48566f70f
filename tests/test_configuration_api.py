BASE = "/tmf-api/productConfigurationManagement/v5"

SPEC = {"id": "pcs-1", "name": "Phone configuration"}


def characteristic(name, min_cardinality, selected):
    return {
        "name": name,
        "minCardinality": min_cardinality,
        "configurationCharacteristicValue": [
            {"isSelected": flag, "characteristicValue": {"value": str(i)}}
            for i, flag in enumerate(selected)
        ],
    }


def check_payload(instant_sync):
    return {
        "instantSync": instant_sync,
        "productConfigurationSpecification": SPEC,
        "checkProductConfigurationItem": [
            {
                "id": "01",
                "productConfiguration": {
                    "configurationCharacteristic": [characteristic("Color", 1, [True, False])]
                },
            },
            {
                "id": "02",
                "productConfiguration": {
                    "configurationCharacteristic": [
                        characteristic("Color", 1, [False, False]),
                        characteristic("Storage", 2, [True]),
                        characteristic("Case", 0, []),
                    ]
                },
            },
        ],
    }


def test_instant_check_validates_items(client):
    resp = client.post(f"{BASE}/checkProductConfiguration", json=check_payload(True))
    assert resp.status_code == 200
    check = resp.json()

    assert check["@type"] == "CheckProductConfiguration"
    assert check["state"] == "done"
    approved, rejected = check["checkProductConfigurationItem"]

    assert approved["@type"] == "CheckProductConfigurationItem"
    assert approved["state"] == "approved"
    assert approved["stateReason"] == []
    assert approved["productConfigurationSpecification"] == SPEC
    assert approved["contextItem"]["@type"] == "ItemRef"
    assert approved["contextItem"]["id"] == "01"
    assert approved["contextItem"]["@referredType"] == "QuoteItem"

    assert rejected["state"] == "rejected"
    assert [r["label"] for r in rejected["stateReason"]] == [
        "Missing required characteristic: Color",
        "Missing required characteristic: Storage",
    ]
    assert rejected["stateReason"][0]["@type"] == "StateReason"


def test_deferred_check_is_acknowledged(client):
    resp = client.post(f"{BASE}/checkProductConfiguration", json=check_payload(False))
    assert resp.status_code == 201
    check = resp.json()
    assert check["state"] == "acknowledged"
    assert all(item["stateReason"] == [] for item in check["checkProductConfigurationItem"])
    assert all("contextItem" not in item for item in check["checkProductConfigurationItem"])


def test_projection_keeps_configuration_specification(client):
    check = client.post(f"{BASE}/checkProductConfiguration", json=check_payload(True)).json()

    resp = client.get(f"{BASE}/checkProductConfiguration/{check['id']}", params={"fields": "state"})
    assert resp.json() == {
        "@type": "CheckProductConfiguration",
        "id": check["id"],
        "href": check["href"],
        "state": "done",
        "productConfigurationSpecification": SPEC,
    }

    listed = client.get(f"{BASE}/checkProductConfiguration", params={"fields": "state"}).json()
    assert listed[0]["productConfigurationSpecification"] == SPEC


def test_instant_query_computes_items(client):
    resp = client.post(
        f"{BASE}/queryProductConfiguration",
        json={
            "instantSync": True,
            "requestProductConfigurationItem": [
                {"id": "01", "productConfiguration": {"productOffering": {"id": "po-1"}}},
                {"id": "abc"},
            ],
        },
    )
    assert resp.status_code == 200
    query = resp.json()
    assert query["state"] == "done"

    first, second = query["computedProductConfigurationItem"]
    assert first["id"] == "02"
    assert first["@type"] == "QueryProductConfigurationItem"
    assert first["state"] == "approved"
    assert first["productConfigurationItemRelationship"][0] == {
        "@type": "ProductConfigurationItemRelationship",
        "id": "01",
        "relationshipType": "requestItem",
    }
    configuration = first["productConfiguration"]
    assert configuration["productOffering"] == {"id": "po-1"}
    assert configuration["configurationAction"][0]["action"] == "add"
    assert second["id"] != "abc"


def test_deferred_query_and_delete(client):
    resp = client.post(f"{BASE}/queryProductConfiguration", json={"requestProductConfigurationItem": []})
    assert resp.status_code == 201
    query = resp.json()
    assert query["state"] == "acknowledged"
    assert "computedProductConfigurationItem" not in query

    url = f"{BASE}/queryProductConfiguration/{query['id']}"
    assert client.delete(url).status_code == 204
    assert client.get(url).status_code == 404


def test_loosely_typed_characteristics_are_evaluated(client):
    payload = {
        "instantSync": True,
        "checkProductConfigurationItem": [
            {
                "id": "01",
                "productConfiguration": {
                    "configurationCharacteristic": [
                        characteristic("Color", "1", [False]),
                        characteristic("Storage", "many", []),
                        characteristic("Case", None, []),
                        "not-a-characteristic",
                    ]
                },
            },
            {
                "id": "02",
                "productConfiguration": {
                    "configurationCharacteristic": [characteristic("Color", "1", [True])]
                },
            },
        ],
    }
    resp = client.post(f"{BASE}/checkProductConfiguration", json=payload)
    assert resp.status_code == 200

    rejected, approved = resp.json()["checkProductConfigurationItem"]
    assert rejected["state"] == "rejected"
    assert [r["label"] for r in rejected["stateReason"]] == [
        "Missing required characteristic: Color"
    ]
    assert approved["state"] == "approved"
