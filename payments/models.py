"""Payment records."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from django.db import models


class PaymentProvider(models.TextChoices):
	TEST = 'test', 'Test'


class PaymentStatus(models.TextChoices):
	SUCCEEDED = 'succeeded', 'Succeeded'


@dataclass(frozen=True)
class CardDetails:
	cardholder_name: str
	number: str
	expiry: str
	cvv: str
	zip_code: str

	@property
	def last4(self) -> str:
		return self.number[-4:]


@dataclass
class PaymentResult:
	reference: str
	status: str
	is_success: bool
	provider: str
	amount: Decimal
	currency: str
	metadata: dict[str, Any] = field(default_factory=dict)
