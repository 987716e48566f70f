"""
Inventory Service — TMF637 リソーステンプレート
"""

from services.shared.identity import now_iso
from services.shared.normalizer import Fallback, Missing, RefSpec, ResourceTemplate

PRODUCT_ARRAYS = (
    "relatedParty",
    "productCharacteristic",
    "productPrice",
    "productRelationship",
    "place",
    "productOrderItem",
    "realizingResource",
    "realizingService",
    "agreementItem",
)

PRODUCT = ResourceTemplate(
    type_name="Product",
    path="tmf-api/product",
    scalars={
        "name": Missing("Default Product Name"),
        "description": Missing("Default product description"),
        "status": Missing("created"),
        "creationDate": Fallback(now_iso),
        "startDate": Missing(now_iso),
        "terminationDate": Missing(""),
        "isBundle": Fallback(False),
        "isCustomerVisible": Missing(True),
        "productSerialNumber": Missing(""),
        "@baseType": Fallback("BaseProduct"),
        "@schemaLocation": Fallback("http://example.com/schema/Product"),
    },
    arrays=PRODUCT_ARRAYS,
    refs={
        "productSpecification": RefSpec(
            "ProductSpecificationRef",
            "ProductSpecification",
            path="productCatalogManagement/v5/productSpecification",
            defaults={
                "name": Missing("Default Specification"),
                "version": Missing("1.0"),
            },
            override_type=False,
            many=False,
        ),
        "billingAccount": RefSpec(
            "BillingAccountRef",
            "BillingAccount",
            path="tmf-api/accountManagement/v5/billingAccount",
            defaults={"name": Missing("Default Billing Account")},
            override_type=False,
            many=False,
        ),
        "productOffering": RefSpec(
            "ProductOfferingRef",
            "ProductOffering",
            path="productCatalogManagement/v5/productOffering",
            defaults={"name": Missing("Default Product Offering")},
            override_type=False,
            many=False,
        ),
    },
    id_prefix="prod",
)

HUB = ResourceTemplate(
    type_name="Hub",
    path="tmf-api/hub",
    scalars={"creationDate": Fallback(now_iso)},
    id_prefix="hub",
)
