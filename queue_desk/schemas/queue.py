from datetime import date

from pydantic import BaseModel

from queue_desk.schemas.booking import BookingItem


class QueueActionRequest(BaseModel):
    branch_id: int
    booking_date: date | None = None


class QueueSnapshotResponse(BaseModel):
    branch_id: int
    booking_date: date
    now_serving: BookingItem | None = None
    waiting: list[BookingItem]
    in_queue: int
    total: int


class QueueAdvanceResponse(BaseModel):
    finished: BookingItem | None = None
    called: BookingItem | None = None


class CustomerQueueStatusResponse(BaseModel):
    branch_id: int
    booking_date: date
    now_serving_number: int | None = None
    queue: list[BookingItem]
    my_booking: BookingItem | None = None
    ahead_of_me: int | None = None
