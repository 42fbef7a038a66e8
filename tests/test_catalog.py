"""
Tests for the variant catalogs and booking quotes.
"""

from dataclasses import FrozenInstanceError

import pytest

from queue_desk.catalog import BARBERSHOP, LAUNDRY, VARIANTS, get_variant
from queue_desk.core.domain_exceptions import CatalogError
from queue_desk.services.booking_service import quote_booking


def test_get_variant_is_case_insensitive():
    assert get_variant("Laundry") is LAUNDRY
    assert get_variant(" barbershop ") is BARBERSHOP


def test_unknown_variant_is_a_configuration_error():
    with pytest.raises(CatalogError):
        get_variant("carwash")


def test_unknown_service_code_returns_none():
    assert BARBERSHOP.get_service("wash_fold") is None
    assert BARBERSHOP.get_service("") is None
    with pytest.raises(CatalogError):
        BARBERSHOP.require_service("wash_fold")


@pytest.mark.parametrize("variant", list(VARIANTS.values()), ids=list(VARIANTS))
def test_total_cost_is_unit_price_times_quantity_for_every_service(variant):
    for code, entry in variant.services.items():
        quote = quote_booking(variant, code, 3)
        assert quote.total_cost == entry.price * 3
        assert quote.unit_price == entry.price


def test_basic_haircut_quote():
    quote = quote_booking(BARBERSHOP, "basic_haircut", 1)

    assert quote.total_cost == 150
    assert quote.duration_minutes == 30


def test_barbershop_duration_does_not_scale_with_pax():
    assert quote_booking(BARBERSHOP, "premium_haircut", 4).duration_minutes == 45


def test_wash_and_fold_quote_scales_with_weight():
    entry = LAUNDRY.services["wash_fold"]
    quote = quote_booking(LAUNDRY, "wash_fold", 5)

    assert entry.name == "Wash & Fold"
    assert entry.unit == "per kg"
    assert quote.total_cost == 300
    assert quote.duration_minutes == entry.duration * 5


def test_barbershop_time_slots_run_every_half_hour():
    assert BARBERSHOP.time_slots[0] == "09:00"
    assert BARBERSHOP.time_slots[1] == "09:30"
    assert BARBERSHOP.time_slots[-1] == "20:00"
    assert len(BARBERSHOP.time_slots) == 23


def test_catalog_entries_are_immutable():
    entry = BARBERSHOP.services["shave"]
    with pytest.raises(FrozenInstanceError):
        entry.price = 1
    with pytest.raises(TypeError):
        BARBERSHOP.services["new"] = entry
