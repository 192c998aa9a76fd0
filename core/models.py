"""Shared base records and helpers for the booking platform."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime

from django.conf import settings
from django.utils import timezone

REFERENCE_DIGITS = 6
REFERENCE_SPACE = 10 ** REFERENCE_DIGITS


@dataclass(kw_only=True)
class TimeStampedRecord:
	"""Base record carrying a creation timestamp."""

	created_at: datetime = field(default_factory=timezone.now)


def current_millis() -> int:
	return int(time.time() * 1000)


def reference_prefix() -> str:
	return getattr(settings, 'SKYBOOK_BOOKING_REFERENCE_PREFIX', 'SK')


def generate_reference(prefix: str | None = None, *, millis: int | None = None) -> str:
	"""Build a human-readable reference from the last six digits of the epoch milliseconds."""

	if millis is None:
		millis = current_millis()
	return f"{prefix or reference_prefix()}{millis % REFERENCE_SPACE:0{REFERENCE_DIGITS}d}"


def candidate_references(prefix: str | None = None, *, millis: int | None = None):
	"""Yield the timestamp reference first, then successive suffixes wrapping at 999999."""

	prefix = prefix or reference_prefix()
	if millis is None:
		millis = current_millis()
	start = millis % REFERENCE_SPACE
	for offset in range(REFERENCE_SPACE):
		yield generate_reference(prefix, millis=start + offset)


def send_booking_email(subject: str, message: str, recipient_list: list[str]) -> None:
	"""Send transactional booking emails safely."""

	if not recipient_list:
		return

	from django.core.mail import send_mail

	send_mail(
		subject,
		message,
		settings.DEFAULT_FROM_EMAIL,
		recipient_list,
		fail_silently=False,
	)
