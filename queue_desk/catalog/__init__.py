"""Static service catalogs for each deployment variant."""

from queue_desk.catalog.variants import (
    BARBERSHOP,
    LAUNDRY,
    PAYMENT_METHODS,
    VARIANTS,
    ServiceCatalogEntry,
    VariantConfig,
    get_variant,
)

__all__ = [
    "BARBERSHOP",
    "LAUNDRY",
    "PAYMENT_METHODS",
    "VARIANTS",
    "ServiceCatalogEntry",
    "VariantConfig",
    "get_variant",
]
