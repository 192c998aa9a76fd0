from decimal import Decimal

from django.test import SimpleTestCase, override_settings

from core.exceptions import ValidationError

from .models import PaymentProvider, PaymentStatus
from .services import charge_booking, validate_card_details

CARD = {
	'cardName': 'Alice Traveller',
	'cardNumber': '4242 4242 4242 4242',
	'expiryDate': '12/30',
	'cvv': '123',
	'zipCode': '10001',
}


class CardValidationTests(SimpleTestCase):

	def test_valid_card_is_normalized(self) -> None:
		card = validate_card_details(CARD)
		self.assertEqual(card.number, '4242424242424242')
		self.assertEqual(card.last4, '4242')
		self.assertEqual(card.cardholder_name, 'Alice Traveller')

	def test_first_failing_field_is_reported(self) -> None:
		cases = [
			({'cardName': ''}, 'Please enter cardholder name'),
			({'cardNumber': '4242'}, 'Please enter a valid 16-digit card number'),
			({'expiryDate': '1230'}, 'Please enter expiry date in MM/YY format'),
			({'cvv': 'abc'}, 'Please enter a valid 3-digit CVV'),
			({'zipCode': '1000'}, 'Please enter a valid 5-digit zip code'),
			({'cardName': '', 'cvv': ''}, 'Please enter cardholder name'),
		]
		for overrides, message in cases:
			with self.subTest(overrides=overrides):
				with self.assertRaisesMessage(ValidationError, message):
					validate_card_details({**CARD, **overrides})


class ChargeTests(SimpleTestCase):

	@override_settings(SKYBOOK_CURRENCY='gbp')
	def test_test_provider_always_succeeds(self) -> None:
		result = charge_booking(
			card=validate_card_details(CARD),
			amount=Decimal('450.00'),
			description='Flight booking for SA-101',
			metadata={'flight': 'SA-101'},
		)
		self.assertTrue(result.is_success)
		self.assertEqual(result.status, PaymentStatus.SUCCEEDED)
		self.assertEqual(result.provider, PaymentProvider.TEST)
		self.assertEqual(result.currency, 'gbp')
		self.assertRegex(result.reference, r'^test_[0-9a-f]{12}$')
		self.assertEqual(result.metadata, {'flight': 'SA-101', 'card_last4': '4242'})
