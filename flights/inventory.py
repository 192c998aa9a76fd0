from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings

from core.repositories import Repository

from .models import Flight


@dataclass(frozen=True)
class SeatLayout:
    rows: int
    letters: str

    @classmethod
    def from_settings(cls) -> 'SeatLayout':
        return cls(
            rows=getattr(settings, 'SKYBOOK_SEAT_ROWS', 18),
            letters=getattr(settings, 'SKYBOOK_SEAT_LETTERS', 'ABCDEF'),
        )

    def seat_codes(self) -> list[str]:
        return [f"{row}{letter}" for row in range(1, self.rows + 1) for letter in self.letters]


DEFAULT_FLIGHTS: tuple[Flight, ...] = (
    Flight(
        id='FL001',
        airline='SkyAir',
        flight_number='SA-101',
        origin='New York (JFK)',
        destination='London (LHR)',
        departure_time='2024-12-20T10:00:00',
        arrival_time='2024-12-20T22:00:00',
        duration='7h 30m',
        price=Decimal('450'),
        available_seats=45,
        total_seats=180,
    ),
    Flight(
        id='FL002',
        airline='AeroGlobal',
        flight_number='AG-205',
        origin='New York (JFK)',
        destination='London (LHR)',
        departure_time='2024-12-20T14:30:00',
        arrival_time='2024-12-21T02:30:00',
        duration='8h 00m',
        price=Decimal('380'),
        available_seats=78,
        total_seats=180,
    ),
    Flight(
        id='FL003',
        airline='SkyAir',
        flight_number='SA-102',
        origin='New York (JFK)',
        destination='London (LHR)',
        departure_time='2024-12-21T08:00:00',
        arrival_time='2024-12-21T20:00:00',
        duration='7h 30m',
        price=Decimal('520'),
        available_seats=12,
        total_seats=180,
    ),
    Flight(
        id='FL004',
        airline='SkyAir',
        flight_number='SA-201',
        origin='London (LHR)',
        destination='Paris (CDG)',
        departure_time='2024-12-22T09:15:00',
        arrival_time='2024-12-22T11:30:00',
        duration='1h 15m',
        price=Decimal('120'),
        available_seats=64,
        total_seats=150,
    ),
    Flight(
        id='FL005',
        airline='AeroGlobal',
        flight_number='AG-310',
        origin='London (LGW)',
        destination='New York (JFK)',
        departure_time='2024-12-23T12:00:00',
        arrival_time='2024-12-23T15:10:00',
        duration='8h 10m',
        price=Decimal('410'),
        available_seats=90,
        total_seats=180,
    ),
    Flight(
        id='FL006',
        airline='Pacific Wings',
        flight_number='PW-880',
        origin='San Francisco (SFO)',
        destination='Tokyo (HND)',
        departure_time='2024-12-24T11:00:00',
        arrival_time='2024-12-25T15:20:00',
        duration='11h 20m',
        price=Decimal('890'),
        available_seats=33,
        total_seats=220,
    ),
)


def seed_flights(repository: Repository) -> None:
    """Load the fixed flight catalog into ``repository``."""
    for flight in DEFAULT_FLIGHTS:
        repository.add(flight.id, flight)
