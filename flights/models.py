"""Flight domain records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from django.db import models

from core.models import TimeStampedRecord


@dataclass(frozen=True)
class Flight:
	id: str
	airline: str
	flight_number: str
	origin: str
	destination: str
	departure_time: str
	arrival_time: str
	duration: str
	price: Decimal
	available_seats: int
	total_seats: int

	def __str__(self):  # pragma: no cover
		return f"{self.flight_number}: {self.origin} → {self.destination}"


class SeatStatus(models.TextChoices):
	AVAILABLE = 'available', 'Available'
	OCCUPIED = 'occupied', 'Occupied'
	SELECTED = 'selected', 'Selected'


@dataclass
class SeatMap:
	flight_id: str
	rows: int
	letters: str
	seats: dict[str, str]

	@property
	def available_count(self) -> int:
		return sum(1 for status in self.seats.values() if status == SeatStatus.AVAILABLE)


@dataclass(frozen=True)
class Passenger:
	name: str
	email: str


@dataclass(kw_only=True)
class Booking(TimeStampedRecord):
	class PaymentStatus(models.TextChoices):
		COMPLETED = 'completed', 'Completed'

	reference: str
	flight_id: str
	passengers: list[Passenger]
	seats: list[str]
	total_price: Decimal
	payment_status: str = PaymentStatus.COMPLETED
	payment_reference: str = ''

	@property
	def id(self) -> str:
		return self.reference

	@property
	def booking_date(self) -> datetime:
		return self.created_at

	def __str__(self):  # pragma: no cover
		return f"Flight booking {self.reference}"


@dataclass(kw_only=True)
class DraftBooking(TimeStampedRecord):
	"""Wizard state held between the passenger, seat and payment steps."""

	class Step(models.TextChoices):
		PASSENGERS = 'passengers', 'Passenger details'
		SEATS = 'seats', 'Seat selection'
		PAYMENT = 'payment', 'Payment'

	session_id: str
	flight_id: str
	passenger_count: int
	expires_at: datetime
	passengers: list[Passenger] = field(default_factory=list)
	seats: list[str] = field(default_factory=list)

	@property
	def step(self) -> str:
		if not self.passengers:
			return self.Step.PASSENGERS
		if not self.seats:
			return self.Step.SEATS
		return self.Step.PAYMENT

	def is_expired(self, now: datetime) -> bool:
		return now >= self.expires_at
