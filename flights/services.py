"""Flight catalog, seat map and booking ledger services."""

from __future__ import annotations

import logging
import random
from decimal import Decimal
from typing import Any, Iterable

from django.conf import settings

from core.exceptions import NotFound
from core.models import candidate_references, send_booking_email
from core.repositories import Repository, get_repository

from .inventory import SeatLayout
from .models import Booking, DraftBooking, Flight, Passenger, SeatMap, SeatStatus

logger = logging.getLogger(__name__)


def _flights(repository: Repository | None) -> Repository:
    return repository if repository is not None else get_repository('flights')


def _bookings(repository: Repository | None) -> Repository:
    return repository if repository is not None else get_repository('bookings')


def _matches(value: str, query: str | None) -> bool:
    if not query:
        return True
    return query.strip().lower() in value.lower()


def search_flights(
    *,
    origin: str | None = None,
    destination: str | None = None,
    repository: Repository | None = None,
) -> list[Flight]:
    """Case-insensitive substring match on origin and destination, in catalog order."""
    return _flights(repository).filter(
        lambda flight: _matches(flight.origin, origin) and _matches(flight.destination, destination)
    )


def get_flight(flight_id: str, *, repository: Repository | None = None) -> Flight:
    flight = _flights(repository).get(flight_id)
    if flight is None:
        raise NotFound('Flight not found')
    return flight


def calculate_total_price(flight: Flight, passenger_count: int) -> Decimal:
    return (flight.price * max(0, passenger_count)).quantize(Decimal('0.01'))


# Seat maps


def simulated_occupancy(flight: Flight, layout: SeatLayout) -> set[str]:
    """Seats shown as taken by other travellers; stable for a given flight."""
    rate = getattr(settings, 'SKYBOOK_SEAT_OCCUPANCY_RATE', 0.3)
    rng = random.Random(flight.id)
    return {code for code in layout.seat_codes() if rng.random() < rate}


def booked_seats(flight_id: str, *, repository: Repository | None = None) -> set[str]:
    seats: set[str] = set()
    for booking in _bookings(repository).filter(lambda item: item.flight_id == flight_id):
        seats.update(booking.seats)
    return seats


def occupied_seats(
    flight: Flight,
    *,
    layout: SeatLayout | None = None,
    bookings: Repository | None = None,
) -> set[str]:
    layout = layout or SeatLayout.from_settings()
    return simulated_occupancy(flight, layout) | booked_seats(flight.id, repository=bookings)


def build_seat_map(
    flight: Flight,
    *,
    draft: DraftBooking | None = None,
    bookings: Repository | None = None,
) -> SeatMap:
    layout = SeatLayout.from_settings()
    occupied = occupied_seats(flight, layout=layout, bookings=bookings)
    selected = set(draft.seats) if draft is not None and draft.flight_id == flight.id else set()
    seats: dict[str, str] = {}
    for code in layout.seat_codes():
        if code in occupied:
            seats[code] = SeatStatus.OCCUPIED.value
        elif code in selected:
            seats[code] = SeatStatus.SELECTED.value
        else:
            seats[code] = SeatStatus.AVAILABLE.value
    return SeatMap(flight_id=flight.id, rows=layout.rows, letters=layout.letters, seats=seats)


# Booking ledger


def list_bookings(*, repository: Repository | None = None) -> list[Booking]:
    return _bookings(repository).all()


def get_booking(reference: str, *, repository: Repository | None = None) -> Booking:
    booking = _bookings(repository).get(reference)
    if booking is None:
        raise NotFound('Booking not found')
    return booking


def _coerce_passengers(passengers: Iterable[Any]) -> list[Passenger]:
    prepared: list[Passenger] = []
    for passenger in passengers:
        if isinstance(passenger, Passenger):
            prepared.append(passenger)
        else:
            prepared.append(Passenger(
                name=(passenger.get('name') or '').strip(),
                email=(passenger.get('email') or '').strip(),
            ))
    return prepared


def create_booking(
    *,
    flight_id: str,
    passengers: Iterable[Any],
    seats: Iterable[str],
    total_price: Decimal,
    payment_reference: str = '',
    notify: bool = True,
    repository: Repository | None = None,
    flights: Repository | None = None,
) -> Booking:
    """Record a booking under a fresh reference.

    The confirmation email goes out unless ``notify`` is off, in which case
    the caller sends it with :func:`send_booking_confirmation` once it has
    released any locks it holds.
    """
    bookings = _bookings(repository)
    passenger_list = _coerce_passengers(passengers)
    seat_list = [str(seat).strip().upper() for seat in seats]

    booking = bookings.add_first_free(
        candidate_references(),
        lambda reference: Booking(
            reference=reference,
            flight_id=flight_id,
            passengers=passenger_list,
            seats=seat_list,
            total_price=Decimal(total_price).quantize(Decimal('0.01')),
            payment_reference=payment_reference,
        ),
    )
    logger.info(
        'Booking %s created for flight %s (%d passenger(s), total %s)',
        booking.reference,
        flight_id,
        len(passenger_list),
        booking.total_price,
    )

    if notify:
        send_booking_confirmation(booking, flights=flights)
    return booking


def send_booking_confirmation(booking: Booking, *, flights: Repository | None = None) -> bool:
    """Email the passengers; a stored booking stands even when sending fails."""
    flight = _flights(flights).get(booking.flight_id)
    route = f' from {flight.origin} to {flight.destination}' if flight else ''
    seat_numbers = ', '.join(booking.seats) or 'to be assigned'
    try:
        send_booking_email(
            subject='Flight booking confirmation',
            message=(
                f'Your flight {flight.flight_number if flight else booking.flight_id}{route} has been booked.\n'
                f'Seat(s): {seat_numbers}. Reference: {booking.reference}.'
            ),
            recipient_list=sorted({passenger.email for passenger in booking.passengers if passenger.email}),
        )
    except Exception:
        logger.exception('Could not send confirmation email for booking %s', booking.reference)
        return False
    return True
