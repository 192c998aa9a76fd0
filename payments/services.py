"""Simulated payment provider."""

from __future__ import annotations

import logging
import re
import uuid
from decimal import Decimal
from typing import Any, Dict, Mapping

from django.conf import settings

from core.exceptions import ValidationError

from .models import CardDetails, PaymentProvider, PaymentResult, PaymentStatus

logger = logging.getLogger(__name__)

CARD_NUMBER_RE = re.compile(r'^\d{16}$')
EXPIRY_RE = re.compile(r'^\d{2}/\d{2}$')
CVV_RE = re.compile(r'^\d{3}$')
ZIP_CODE_RE = re.compile(r'^\d{5}$')


def _text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    return '' if value is None else str(value).strip()


def validate_card_details(data: Mapping[str, Any]) -> CardDetails:
    """Check card fields in order and raise on the first one that fails."""
    cardholder_name = _text(data, 'cardName')
    number = re.sub(r'\s', '', _text(data, 'cardNumber'))
    expiry = _text(data, 'expiryDate')
    cvv = _text(data, 'cvv')
    zip_code = _text(data, 'zipCode')

    if not cardholder_name:
        raise ValidationError('Please enter cardholder name', errors={'cardName': 'required'})
    if not CARD_NUMBER_RE.match(number):
        raise ValidationError('Please enter a valid 16-digit card number', errors={'cardNumber': 'invalid'})
    if not EXPIRY_RE.match(expiry):
        raise ValidationError('Please enter expiry date in MM/YY format', errors={'expiryDate': 'invalid'})
    if not CVV_RE.match(cvv):
        raise ValidationError('Please enter a valid 3-digit CVV', errors={'cvv': 'invalid'})
    if not ZIP_CODE_RE.match(zip_code):
        raise ValidationError('Please enter a valid 5-digit zip code', errors={'zipCode': 'invalid'})

    return CardDetails(
        cardholder_name=cardholder_name,
        number=number,
        expiry=expiry,
        cvv=cvv,
        zip_code=zip_code,
    )


def charge_booking(
    *,
    card: CardDetails,
    amount: Decimal,
    description: str,
    currency: str | None = None,
    metadata: Dict[str, Any] | None = None,
) -> PaymentResult:
    """Charge ``card``; no gateway is contacted and valid cards always succeed."""
    metadata = dict(metadata or {})
    metadata.setdefault('card_last4', card.last4)
    currency = currency or getattr(settings, 'SKYBOOK_CURRENCY', 'usd')
    reference = f'test_{uuid.uuid4().hex[:12]}'
    logger.info('Using test payment provider for %s: %s %s', description, amount, currency)
    return PaymentResult(
        reference=reference,
        status=PaymentStatus.SUCCEEDED,
        is_success=True,
        provider=PaymentProvider.TEST,
        amount=amount,
        currency=currency,
        metadata=metadata,
    )
