"""Read-only catalog of the deployed variant."""

from fastapi import APIRouter, Depends, HTTPException, Query

from queue_desk.core.context import AppContext, get_context
from queue_desk.core.domain_exceptions import InputValidationError
from queue_desk.schemas.booking import BookingQuoteResponse
from queue_desk.schemas.common import APIResponse
from queue_desk.services.booking_service import quote_booking

router = APIRouter(prefix="/catalog", tags=["catalog"])


@router.get("/", response_model=APIResponse[dict])
def get_catalog(ctx: AppContext = Depends(get_context)):
    variant = ctx.variant
    return APIResponse(
        success=True,
        data={
            "variant": variant.name,
            "title": variant.title,
            "services": [
                {
                    "code": entry.code,
                    "name": entry.name,
                    "price": entry.price,
                    "duration": entry.duration,
                    "unit": entry.unit,
                }
                for entry in variant.services.values()
            ],
            "payment_methods": [
                {"code": code, "name": name} for code, name in variant.payment_methods.items()
            ],
            "time_slots": list(variant.time_slots),
            "max_quantity": variant.max_quantity,
            "quantity_label": variant.quantity_label,
        },
    )


@router.get("/quote", response_model=APIResponse[BookingQuoteResponse])
def get_quote(
    service_type: str,
    quantity: int = Query(default=1, ge=1),
    ctx: AppContext = Depends(get_context),
):
    if ctx.variant.get_service(service_type) is None:
        raise HTTPException(status_code=404, detail="Unknown service.")
    if quantity > ctx.variant.max_quantity:
        raise InputValidationError(
            fields={"quantity": f"Quantity cannot exceed {ctx.variant.max_quantity}"},
            message="Quote request is invalid.",
        )

    quote = quote_booking(ctx.variant, service_type, quantity)
    return APIResponse(
        success=True,
        data=BookingQuoteResponse(
            service_type=quote.service_type,
            quantity=quote.quantity,
            unit_price=quote.unit_price,
            total_cost=quote.total_cost,
            duration_minutes=quote.duration_minutes,
        ),
    )
