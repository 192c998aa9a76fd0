"""User records for the account directory."""

from __future__ import annotations

from dataclasses import dataclass

from core.models import TimeStampedRecord


@dataclass(kw_only=True)
class User(TimeStampedRecord):
	"""Directory entry keyed by ``id``; ``email`` is unique ignoring case."""

	id: str
	email: str
	name: str
	password: str

	def __str__(self) -> str:  # pragma: no cover - human readable
		return self.name or self.email

	@property
	def email_key(self) -> str:
		return normalize_email(self.email)


def normalize_email(email: str) -> str:
	return (email or '').strip().lower()
