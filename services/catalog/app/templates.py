"""
Catalog Service — TMF620 リソーステンプレート

Category / Catalog / ProductOffering / ProductOfferingPrice /
ProductSpecification の正規化ルール。
"""

from services.shared.identity import DEFAULT_REF_ID, locator, now_iso
from services.shared.normalizer import Fallback, Missing, RefSpec, ResourceTemplate

BASE_PATH = "productCatalogManagement/v5"

SCHEMA_LOCATION = "http://localhost:3000/schema/ProductSpecification.json"


def _catalog_path(kind: str) -> str:
    return f"{BASE_PATH}/{kind}"


# ── 共通のデフォルト ─────────────────────────────

def _common_scalars(default_name: str) -> dict:
    return {
        "name": Fallback(default_name),
        "description": Fallback(""),
        "version": Fallback("1.0"),
        "lifecycleStatus": Fallback("Active"),
        "validFor": Fallback({}),
        "lastUpdate": Fallback(now_iso),
    }


def _default_spec_ref() -> dict:
    return {
        "@type": "ProductSpecificationRef",
        "@referredType": "ProductSpecification",
        "href": locator(_catalog_path("productSpecification"), DEFAULT_REF_ID),
        "id": DEFAULT_REF_ID,
        "name": "Default Spec",
        "targetProductSchema": {
            "@type": "ProductSpecification",
            "@schemaLocation": SCHEMA_LOCATION,
        },
    }


# ── 参照ルール ───────────────────────────────────

CATEGORY_REF = RefSpec(
    "CategoryRef",
    "Category",
    path=_catalog_path("category"),
    defaults={"name": Fallback("Default Category")},
)
CHANNEL_REF = RefSpec(
    "ChannelRef", "Channel", path="tmf-api/salesChannelManagement/v5/channel"
)
PLACE_REF = RefSpec(
    "PlaceRef",
    "GeographicAddress",
    path="tmf-api/geographicAddressManagement/v5/geographicAddress",
)
POLICY_REF = RefSpec("PolicyRef", "Policy", path="tmf-api/policyManagement/v5/policy")
ATTACHMENT_REF = RefSpec(
    "AttachmentRefOrValue",
    "Attachment",
    path="tmf-api/documentManagement/v5/attachment",
    defaults={
        "mimeType": Fallback("application/pdf"),
        "attachmentType": Fallback("document"),
        "size": Fallback({"amount": 1024, "units": "bytes"}),
    },
)
TERM = RefSpec(
    "ProductOfferingTerm",
    defaults={"duration": Fallback({"amount": 12, "units": "Month"})},
)
BUNDLED_OFFERING_REF = RefSpec(
    "BundledProductOfferingRef",
    "ProductOffering",
    path=_catalog_path("productOffering"),
    defaults={
        "name": Fallback("Default Bundle"),
        "bundledProductOfferingOption": Fallback({
            "@type": "BundledProductOfferingOption",
            "numberRelOfferDefault": 1,
            "numberRelOfferLowerLimit": 1,
            "numberRelOfferUpperLimit": 5,
        }),
    },
)
CHARACTERISTIC_VALUE = RefSpec("CharacteristicValueSpecification", override_type=False)
CHAR_SPEC_RELATIONSHIP = RefSpec(
    "CharacteristicSpecificationRelationship",
    defaults={
        "name": Fallback("Default Relationship"),
        "parentSpecificationId": Fallback(DEFAULT_REF_ID),
        "relationshipType": Fallback("dependency"),
    },
)
SPEC_CHAR_VALUE_USE = RefSpec(
    "ProductSpecificationCharacteristicValueUse",
    defaults={
        "name": Fallback("Default Characteristic"),
        "valueType": Fallback("string"),
        "productSpecification": Fallback(_default_spec_ref),
    },
    nested={
        "productSpecCharacteristicValue": RefSpec(
            "CharacteristicValueSpecification",
            override_type=False,
            defaults={"valueType": Fallback("string")},
        ),
    },
)
CHARACTERISTIC_SPEC = RefSpec(
    "CharacteristicSpecification",
    defaults={
        "name": Fallback("Default Characteristic"),
        "valueType": Fallback("string"),
    },
    nested={
        "characteristicValueSpecification": CHARACTERISTIC_VALUE,
        "charSpecRelationship": CHAR_SPEC_RELATIONSHIP,
    },
)


# ── Category ─────────────────────────────────────

CATEGORY = ResourceTemplate(
    type_name="Category",
    path=_catalog_path("category"),
    scalars={
        **_common_scalars("Default Category"),
        "isRoot": Fallback(False),
    },
)


# ── Catalog ──────────────────────────────────────

CATALOG = ResourceTemplate(
    type_name="Catalog",
    path=_catalog_path("productCatalog"),
    scalars={
        **_common_scalars("Default Product Catalog"),
        "catalogType": Fallback("ProductCatalog"),
    },
    arrays=("category", "relatedParty"),
    refs={
        "category": RefSpec("CategoryRef", "Category"),
        "relatedParty": RefSpec("RelatedPartyRefOrPartyRoleRef"),
    },
)


# ── ProductOffering ──────────────────────────────

PRODUCT_OFFERING = ResourceTemplate(
    type_name="ProductOffering",
    path=_catalog_path("productOffering"),
    scalars={
        **_common_scalars("Default Product Offering"),
        "isBundle": Fallback(False),
        "isSellable": Missing(True),
        "statusReason": Fallback(""),
    },
    arrays=(
        "agreement",
        "allowedAction",
        "attachment",
        "bundledGroupProductOffering",
        "bundledProductOffering",
        "category",
        "channel",
        "marketSegment",
        "place",
        "policy",
        "prodSpecCharValueUse",
        "productOfferingCharacteristic",
        "productOfferingPrice",
        "productOfferingRelationship",
        "productOfferingTerm",
    ),
    refs={
        "agreement": RefSpec(
            "AgreementRef", "Agreement", path="tmf-api/agreementManagement/v5/agreement"
        ),
        "allowedAction": RefSpec(
            "AllowedProductAction", nested={"channel": CHANNEL_REF}
        ),
        "attachment": ATTACHMENT_REF,
        "bundledGroupProductOffering": RefSpec(
            "BundledGroupProductOffering",
            defaults={
                "name": Fallback("Default Group"),
                "bundledGroupProductOfferingOption": Fallback({
                    "@type": "BundledGroupProductOfferingOption",
                    "numberRelOfferLowerLimit": 1,
                    "numberRelOfferUpperLimit": 10,
                }),
            },
            nested={"bundledProductOffering": BUNDLED_OFFERING_REF},
        ),
        "bundledProductOffering": BUNDLED_OFFERING_REF,
        "category": CATEGORY_REF,
        "channel": CHANNEL_REF,
        "marketSegment": RefSpec(
            "MarketSegmentRef",
            "MarketSegment",
            path="tmf-api/marketSegmentManagement/v5/marketSegment",
        ),
        "place": PLACE_REF,
        "policy": POLICY_REF,
        "prodSpecCharValueUse": SPEC_CHAR_VALUE_USE,
        "productOfferingCharacteristic": RefSpec(
            "ProductOfferingCharacteristic",
            defaults={
                "id": Fallback(DEFAULT_REF_ID),
                "name": Fallback("Default Characteristic"),
                "valueType": Fallback("string"),
            },
            nested={
                "characteristicValueSpecification": CHARACTERISTIC_VALUE,
                "charSpecRelationship": CHAR_SPEC_RELATIONSHIP,
            },
        ),
        "productOfferingPrice": RefSpec(
            "ProductOfferingPriceRef",
            "ProductOfferingPrice",
            path=_catalog_path("productOfferingPrice"),
            defaults={"name": Fallback("Default Price")},
        ),
        "productOfferingRelationship": RefSpec(
            "ProductOfferingRelationship",
            "ProductOffering",
            path=_catalog_path("productOffering"),
        ),
        "productOfferingTerm": TERM,
        "productSpecification": RefSpec(
            "ProductSpecificationRef",
            "ProductSpecification",
            path=_catalog_path("productSpecification"),
            defaults={
                "name": Fallback("Default Spec"),
                "targetProductSchema": Fallback({
                    "@type": "ProductSpecification",
                    "@schemaLocation": SCHEMA_LOCATION,
                }),
            },
            many=False,
        ),
        "resourceCandidate": RefSpec(
            "ResourceCandidateRef",
            "ResourceCandidate",
            path="tmf-api/resourceCatalogManagement/v5/resourceCandidate",
            many=False,
        ),
        "serviceCandidate": RefSpec(
            "ServiceCandidateRef",
            "ServiceCandidate",
            path="tmf-api/serviceCatalogManagement/v5/serviceCandidate",
            many=False,
        ),
        "serviceLevelAgreement": RefSpec(
            "ServiceLevelAgreementRef",
            "ServiceLevelAgreement",
            path="tmf-api/slaManagement/v5/sla",
            many=False,
        ),
    },
    drop_if_empty=("serviceLevelAgreement",),
)


# ── ProductOfferingPrice ─────────────────────────

PRODUCT_OFFERING_PRICE = ResourceTemplate(
    type_name="ProductOfferingPrice",
    path=_catalog_path("productOfferingPrice"),
    scalars={
        **_common_scalars("Default Product Offering Price"),
        "isBundle": Fallback(False),
        "priceType": Fallback("one-time"),
        "price": Fallback({"unit": "USD", "value": 0}),
        "percentage": Fallback(0),
        "recurringChargePeriodType": Fallback(""),
        "recurringChargePeriodLength": Fallback(1),
        "unitOfMeasure": Fallback({"amount": 1, "units": "each"}),
    },
    arrays=(
        "bundledPopRelationship",
        "place",
        "policy",
        "popRelationship",
        "pricingLogicAlgorithm",
        "prodSpecCharValueUse",
        "productOfferingTerm",
        "tax",
    ),
    refs={
        "bundledPopRelationship": RefSpec(
            "BundledProductOfferingPriceRelationship",
            "ProductOfferingPrice",
            path=_catalog_path("productOfferingPrice"),
        ),
        "place": PLACE_REF,
        "policy": POLICY_REF,
        "popRelationship": RefSpec(
            "ProductOfferingPriceRelationship",
            "ProductOfferingPrice",
            path=_catalog_path("productOfferingPrice"),
        ),
        "pricingLogicAlgorithm": RefSpec(
            "PricingLogicAlgorithm",
            path="tmf-api/pricingManagement/v5/pricingLogicAlgorithm",
        ),
        "prodSpecCharValueUse": SPEC_CHAR_VALUE_USE,
        "productOfferingTerm": TERM,
        "tax": RefSpec(
            "TaxItem",
            defaults={"taxAmount": Fallback({"unit": "USD", "value": 0})},
        ),
    },
)


# ── ProductSpecification ─────────────────────────

PRODUCT_SPECIFICATION = ResourceTemplate(
    type_name="ProductSpecification",
    path=_catalog_path("productSpecification"),
    scalars={
        **_common_scalars("Default Product Specification"),
        "brand": Fallback(""),
        "productNumber": Fallback(""),
        "isBundle": Fallback(False),
        "targetProductSchema": Fallback({"@type": "ProductSpecification"}),
    },
    arrays=(
        "attachment",
        "bundledProductSpecification",
        "category",
        "policy",
        "productSpecCharacteristic",
        "productSpecificationRelationship",
        "relatedParty",
        "resourceSpecification",
        "serviceSpecification",
    ),
    refs={
        "attachment": ATTACHMENT_REF,
        "bundledProductSpecification": RefSpec(
            "BundledProductSpecification",
            path=_catalog_path("productSpecification"),
            defaults={"name": Fallback("Default Bundle")},
        ),
        "category": CATEGORY_REF,
        "policy": POLICY_REF,
        "productSpecCharacteristic": CHARACTERISTIC_SPEC,
        "productSpecificationRelationship": RefSpec(
            "ProductSpecificationRelationship",
            "ProductSpecification",
            path=_catalog_path("productSpecification"),
            nested={"characteristic": CHARACTERISTIC_SPEC},
        ),
        "relatedParty": RefSpec(
            "RelatedPartyRefOrPartyRoleRef",
            defaults={"role": Fallback("Owner")},
            nested={
                "partyOrPartyRole": RefSpec(
                    "PartyRef",
                    "Individual",
                    path="tmf-api/partyManagement/v5/party",
                    many=False,
                ),
            },
        ),
        "resourceSpecification": RefSpec(
            "ResourceSpecificationRef",
            "ResourceSpecification",
            path="tmf-api/resourceCatalogManagement/v5/resourceSpecification",
            defaults={"name": Fallback("Default Resource")},
        ),
        "serviceSpecification": RefSpec(
            "ServiceSpecificationRef",
            "ServiceSpecification",
            path="tmf-api/serviceCatalogManagement/v5/serviceSpecification",
            defaults={"name": Fallback("Default Service")},
        ),
    },
)

# パスセグメント → テンプレート
TEMPLATES = {
    "category": CATEGORY,
    "productCatalog": CATALOG,
    "productOffering": PRODUCT_OFFERING,
    "productOfferingPrice": PRODUCT_OFFERING_PRICE,
    "productSpecification": PRODUCT_SPECIFICATION,
}
