"""
Configuration Service — TMF760 リソーステンプレート
"""

from services.shared.normalizer import Fallback, Missing, RefSpec, ResourceTemplate

BASE_PATH = "tmf-api/productConfigurationManagement/v5"

# fields 指定があっても常に返す項目
ALWAYS_PROJECTED = ("productConfigurationSpecification",)

CHECK_PRODUCT_CONFIGURATION = ResourceTemplate(
    type_name="CheckProductConfiguration",
    path=f"{BASE_PATH}/checkProductConfiguration",
    scalars={
        "state": Fallback("acknowledged"),
        "instantSync": Missing(False),
        "provideAlternatives": Missing(False),
    },
    arrays=("checkProductConfigurationItem",),
    refs={
        "checkProductConfigurationItem": RefSpec(
            "CheckProductConfigurationItem",
            defaults={"stateReason": Missing(list)},
        ),
        "channel": RefSpec("ChannelRef", "Channel", override_type=False, many=False),
        "relatedParty": RefSpec("RelatedPartyRefOrPartyRoleRef", override_type=False),
    },
    id_prefix="check",
)

QUERY_PRODUCT_CONFIGURATION = ResourceTemplate(
    type_name="QueryProductConfiguration",
    path=f"{BASE_PATH}/queryProductConfiguration",
    scalars={
        "state": Fallback("acknowledged"),
        "instantSync": Missing(False),
    },
    arrays=("requestProductConfigurationItem",),
    refs={
        "requestProductConfigurationItem": RefSpec(
            "QueryProductConfigurationItem", override_type=False
        ),
        "computedProductConfigurationItem": RefSpec("QueryProductConfigurationItem"),
    },
    id_prefix="query",
)
