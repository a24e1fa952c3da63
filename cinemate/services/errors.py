from collections.abc import Iterable


class BookingError(Exception):
    pass


class SeatConflict(BookingError):
    def __init__(self, seats: Iterable[str]) -> None:
        self.seats = sorted(set(seats))
        super().__init__(f"Seats already taken: {', '.join(self.seats)}")


class BookingNotFound(BookingError):
    def __init__(self, booking_id: int) -> None:
        self.booking_id = booking_id
        super().__init__(f"Booking {booking_id} not found")


class TransientStoreFailure(BookingError):
    pass
