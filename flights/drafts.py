"""Server-held booking wizard: passengers, then seats, then payment."""

from __future__ import annotations

import logging
import uuid
from datetime import timedelta
from typing import Any, Iterable, Mapping

from django.conf import settings
from django.utils import timezone

from core.exceptions import AvailabilityError, NotFound, ValidationError
from core.repositories import Repository, get_repository
from payments.services import charge_booking, validate_card_details

from .inventory import SeatLayout
from .models import Booking, DraftBooking, Passenger
from .services import (
    calculate_total_price,
    create_booking,
    get_flight,
    occupied_seats,
    send_booking_confirmation,
)

logger = logging.getLogger(__name__)


def _drafts(repository: Repository | None) -> Repository:
    return repository if repository is not None else get_repository('drafts')


def _ttl() -> timedelta:
    return timedelta(minutes=getattr(settings, 'SKYBOOK_DRAFT_TTL_MINUTES', 30))


def _touch(draft: DraftBooking, repository: Repository) -> DraftBooking:
    draft.expires_at = timezone.now() + _ttl()
    return repository.save(draft.session_id, draft)


def start_draft(
    *,
    flight_id: str,
    passenger_count: int = 1,
    repository: Repository | None = None,
) -> DraftBooking:
    flight = get_flight(flight_id)
    max_passengers = getattr(settings, 'SKYBOOK_MAX_PASSENGERS', 9)
    if not 1 <= passenger_count <= max_passengers:
        raise ValidationError(
            f'Passenger count must be between 1 and {max_passengers}',
            errors={'passengerCount': 'out of range'},
        )

    now = timezone.now()
    draft = DraftBooking(
        session_id=uuid.uuid4().hex,
        flight_id=flight.id,
        passenger_count=passenger_count,
        created_at=now,
        expires_at=now + _ttl(),
    )
    _drafts(repository).add(draft.session_id, draft)
    logger.debug('Booking session %s started for flight %s', draft.session_id, flight.id)
    return draft


def get_draft(session_id: str, *, repository: Repository | None = None) -> DraftBooking:
    drafts = _drafts(repository)
    draft = drafts.get(session_id)
    if draft is None:
        raise NotFound('Booking session not found')
    if draft.is_expired(timezone.now()):
        drafts.delete(session_id)
        logger.info('Booking session %s expired', session_id)
        raise NotFound('Your booking session expired. Please restart the booking flow.')
    return draft


def set_passengers(
    session_id: str,
    passengers: Iterable[Mapping[str, Any]],
    *,
    repository: Repository | None = None,
) -> DraftBooking:
    drafts = _drafts(repository)
    draft = get_draft(session_id, repository=drafts)
    passenger_list = list(passengers)
    if len(passenger_list) != draft.passenger_count:
        raise ValidationError(f'Please enter details for {draft.passenger_count} passenger(s)')

    prepared: list[Passenger] = []
    for index, detail in enumerate(passenger_list, start=1):
        name = str(detail.get('name') or '').strip()
        email = str(detail.get('email') or '').strip()
        if not name:
            raise ValidationError(f'Please enter name for passenger {index}')
        if not email or '@' not in email:
            raise ValidationError(f'Please enter valid email for passenger {index}')
        prepared.append(Passenger(name=name, email=email))

    draft.passengers = prepared
    return _touch(draft, drafts)


def select_seats(
    session_id: str,
    seats: Iterable[str],
    *,
    repository: Repository | None = None,
) -> DraftBooking:
    drafts = _drafts(repository)
    draft = get_draft(session_id, repository=drafts)
    if not draft.passengers:
        raise ValidationError('Please enter passenger details before choosing seats')

    requested = [str(seat).strip().upper() for seat in seats]
    if len(requested) != draft.passenger_count or len(set(requested)) != len(requested):
        raise ValidationError(f'Please select {draft.passenger_count} seat(s)')

    flight = get_flight(draft.flight_id)
    layout = SeatLayout.from_settings()
    known = set(layout.seat_codes())
    unknown = [seat for seat in requested if seat not in known]
    if unknown:
        raise ValidationError(f'Unknown seat(s): {", ".join(unknown)}', errors={'seats': unknown})

    taken = sorted(set(requested) & occupied_seats(flight, layout=layout))
    if taken:
        raise AvailabilityError(f'Seat {taken[0]} is no longer available', errors={'seats': taken})

    draft.seats = requested
    return _touch(draft, drafts)


def pay_draft(
    session_id: str,
    card_data: Mapping[str, Any],
    *,
    repository: Repository | None = None,
) -> Booking:
    """Charge the card, record the booking and close the booking session."""
    drafts = _drafts(repository)
    draft = get_draft(session_id, repository=drafts)
    if draft.step != DraftBooking.Step.PAYMENT:
        raise ValidationError('Please complete passenger details and seat selection first')

    card = validate_card_details(card_data)
    flight = get_flight(draft.flight_id)

    total_price = calculate_total_price(flight, draft.passenger_count)
    bookings = get_repository('bookings')
    with bookings.atomic():
        # Seats may have been booked by someone else since they were selected.
        taken = sorted(set(draft.seats) & occupied_seats(flight, bookings=bookings))
        if taken:
            draft.seats = []
            _touch(draft, drafts)
            raise AvailabilityError(
                'Seats were just taken. Please review availability and try again.',
                errors={'seats': taken},
            )

        payment = charge_booking(
            card=card,
            amount=total_price,
            description=f'Flight booking for {flight.flight_number}',
            metadata={
                'booking_type': 'flight',
                'flight': flight.flight_number,
                'origin': flight.origin,
                'destination': flight.destination,
            },
        )
        booking = create_booking(
            flight_id=flight.id,
            passengers=draft.passengers,
            seats=draft.seats,
            total_price=total_price,
            payment_reference=payment.reference,
            notify=False,
            repository=bookings,
        )
    drafts.delete(session_id)
    send_booking_confirmation(booking)
    return booking


def discard_draft(session_id: str, *, repository: Repository | None = None) -> bool:
    return _drafts(repository).delete(session_id)
