"""Deployment variants: service catalogs, payment methods and time windows.

One variant is selected per deployment (``QUEUE_DESK_VARIANT``). Everything the
booking flow needs to know about a skin lives in its ``VariantConfig``; nothing
else in the code base branches on the variant name.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Final, Mapping

from queue_desk.core.domain_exceptions import CatalogError


@dataclass(frozen=True)
class ServiceCatalogEntry:
    code: str
    name: str
    price: float
    duration: int
    unit: str | None = None


@dataclass(frozen=True)
class VariantConfig:
    name: str
    title: str
    services: Mapping[str, ServiceCatalogEntry]
    payment_methods: Mapping[str, str]
    time_slots: tuple[str, ...]
    max_quantity: int
    duration_scales_with_quantity: bool
    quantity_label: str = field(default="pax")

    def get_service(self, code: str | None) -> ServiceCatalogEntry | None:
        if not code:
            return None
        return self.services.get(code)

    def require_service(self, code: str) -> ServiceCatalogEntry:
        entry = self.get_service(code)
        if entry is None:
            raise CatalogError(f"Service '{code}' is not in the {self.name} catalog.")
        return entry

    def service_name(self, code: str) -> str:
        entry = self.get_service(code)
        return entry.name if entry is not None else code


def _catalog(*entries: ServiceCatalogEntry) -> Mapping[str, ServiceCatalogEntry]:
    return MappingProxyType({entry.code: entry for entry in entries})


def _half_hour_slots(first_hour: int, last_hour: int) -> tuple[str, ...]:
    slots = []
    for hour in range(first_hour, last_hour + 1):
        slots.append(f"{hour:02d}:00")
        if hour != last_hour:
            slots.append(f"{hour:02d}:30")
    return tuple(slots)


PAYMENT_METHODS: Final[Mapping[str, str]] = MappingProxyType(
    {
        "gcash": "GCash",
        "cash": "Cash",
        "card": "Card",
    }
)

BARBERSHOP: Final[VariantConfig] = VariantConfig(
    name="barbershop",
    title="Barbershop",
    services=_catalog(
        ServiceCatalogEntry("basic_haircut", "Basic Haircut", 150, 30),
        ServiceCatalogEntry("premium_haircut", "Premium Haircut", 250, 45),
        ServiceCatalogEntry("beard_trim", "Beard Trim", 100, 20),
        ServiceCatalogEntry("shave", "Shave", 120, 25),
        ServiceCatalogEntry("hair_color", "Hair Color", 500, 90),
        ServiceCatalogEntry("styling", "Styling", 200, 40),
    ),
    payment_methods=PAYMENT_METHODS,
    time_slots=_half_hour_slots(9, 20),
    max_quantity=10,
    duration_scales_with_quantity=False,
)

LAUNDRY: Final[VariantConfig] = VariantConfig(
    name="laundry",
    title="Laundry",
    services=_catalog(
        ServiceCatalogEntry("wash_fold", "Wash & Fold", 60, 15, "per kg"),
        ServiceCatalogEntry("dry_clean", "Dry Clean", 150, 30, "per piece"),
        ServiceCatalogEntry("ironing", "Ironing", 25, 5, "per piece"),
        ServiceCatalogEntry("wash_only", "Wash Only", 40, 10, "per kg"),
        ServiceCatalogEntry("dry_only", "Dry Only", 35, 10, "per kg"),
        ServiceCatalogEntry("express", "Express Service", 100, 8, "per kg"),
        ServiceCatalogEntry("bedding", "Bedding & Linens", 120, 20, "per piece"),
    ),
    payment_methods=PAYMENT_METHODS,
    time_slots=tuple(f"{hour:02d}:00" for hour in range(8, 19)),
    max_quantity=50,
    duration_scales_with_quantity=True,
    quantity_label="kg/pcs",
)

VARIANTS: Final[Mapping[str, VariantConfig]] = MappingProxyType(
    {
        BARBERSHOP.name: BARBERSHOP,
        LAUNDRY.name: LAUNDRY,
    }
)


def get_variant(name: str) -> VariantConfig:
    """Resolve a deployment variant by name; unknown names are a startup error."""
    variant = VARIANTS.get(name.strip().lower())
    if variant is None:
        raise CatalogError(
            f"Unknown variant '{name}'. Expected one of: {', '.join(VARIANTS)}."
        )
    return variant
