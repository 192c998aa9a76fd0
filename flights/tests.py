import threading
from decimal import Decimal
from smtplib import SMTPException
from unittest import mock

from django.core import mail
from django.test import override_settings
from django.urls import reverse
from rest_framework.test import APISimpleTestCase

from core.exceptions import AvailabilityError, NotFound, ValidationError
from core.repositories import get_repository, reset_repositories

from . import drafts
from .inventory import SeatLayout
from .services import build_seat_map, create_booking, get_flight, search_flights

VALID_CARD = {
	'cardName': 'Alice Traveller',
	'cardNumber': '4242 4242 4242 4242',
	'expiryDate': '12/30',
	'cvv': '123',
	'zipCode': '10001',
}


class FlightCatalogTests(APISimpleTestCase):
	def setUp(self) -> None:
		reset_repositories()

	def test_lists_all_flights_without_filter(self) -> None:
		response = self.client.get(reverse('flights:search'))
		self.assertEqual(response.status_code, 200)
		ids = [flight['id'] for flight in response.json()]
		self.assertEqual(ids[:3], ['FL001', 'FL002', 'FL003'])
		self.assertEqual(len(ids), len(get_repository('flights')))

	def test_filter_by_origin_is_case_insensitive_substring(self) -> None:
		response = self.client.get(reverse('flights:search'), {'from': 'london'})
		flights = response.json()
		self.assertTrue(flights)
		for flight in flights:
			self.assertIn('london', flight['from'].lower())

	def test_filter_by_origin_and_destination(self) -> None:
		response = self.client.get(reverse('flights:search'), {'from': 'New York', 'to': 'LHR'})
		self.assertEqual([flight['id'] for flight in response.json()], ['FL001', 'FL002', 'FL003'])

	def test_flight_payload_uses_client_field_names(self) -> None:
		flight = self.client.get(reverse('flights:detail', args=['FL001'])).json()
		self.assertEqual(flight['flightNumber'], 'SA-101')
		self.assertEqual(flight['from'], 'New York (JFK)')
		self.assertEqual(flight['to'], 'London (LHR)')
		self.assertEqual(flight['price'], 450)
		self.assertEqual(flight['availableSeats'], 45)
		self.assertEqual(flight['totalSeats'], 180)

	def test_unknown_flight_returns_not_found(self) -> None:
		response = self.client.get(reverse('flights:detail', args=['FL999']))
		self.assertEqual(response.status_code, 404)
		self.assertEqual(response.json()['message'], 'Flight not found')

	def test_search_service_without_matches(self) -> None:
		self.assertEqual(search_flights(origin='Atlantis'), [])


class BookingLedgerTests(APISimpleTestCase):
	def setUp(self) -> None:
		reset_repositories()

	def test_create_booking_returns_completed_record(self) -> None:
		response = self.client.post(
			reverse('bookings:list'),
			{
				'flightId': 'FL001',
				'passengers': [{'name': 'A', 'email': 'a@x.com'}],
				'seats': ['1A'],
				'totalPrice': 450,
			},
		)
		self.assertEqual(response.status_code, 201)
		booking = response.json()
		self.assertRegex(booking['bookingReference'], r'^SK\d{6}$')
		self.assertEqual(booking['id'], booking['bookingReference'])
		self.assertEqual(booking['paymentStatus'], 'completed')
		self.assertEqual(booking['totalPrice'], 450)
		self.assertEqual(booking['seats'], ['1A'])
		self.assertEqual(booking['passengers'], [{'name': 'A', 'email': 'a@x.com'}])
		self.assertIn('bookingDate', booking)

	def test_create_booking_sends_confirmation_email(self) -> None:
		self.client.post(
			reverse('bookings:list'),
			{
				'flightId': 'FL001',
				'passengers': [{'name': 'A', 'email': 'a@x.com'}],
				'seats': ['1A'],
				'totalPrice': 450,
			},
		)
		self.assertEqual(len(mail.outbox), 1)
		self.assertEqual(mail.outbox[0].to, ['a@x.com'])
		self.assertIn('SA-101', mail.outbox[0].body)

	def test_missing_fields_are_rejected(self) -> None:
		for missing in ('flightId', 'passengers', 'seats', 'totalPrice'):
			payload = {
				'flightId': 'FL001',
				'passengers': [{'name': 'A', 'email': 'a@x.com'}],
				'seats': ['1A'],
				'totalPrice': 450,
			}
			payload.pop(missing)
			with self.subTest(missing=missing):
				response = self.client.post(reverse('bookings:list'), payload)
				self.assertEqual(response.status_code, 400)
				self.assertEqual(response.json()['message'], 'Missing required fields')
				self.assertIn(missing, response.json()['errors'])
		self.assertEqual(len(get_repository('bookings')), 0)

	def test_zero_total_price_is_accepted(self) -> None:
		response = self.client.post(
			reverse('bookings:list'),
			{'flightId': 'FL002', 'passengers': [], 'seats': [], 'totalPrice': 0},
		)
		self.assertEqual(response.status_code, 201)

	def test_lookup_by_reference(self) -> None:
		created = self.client.post(
			reverse('bookings:list'),
			{
				'flightId': 'FL001',
				'passengers': [{'name': 'A', 'email': 'a@x.com'}],
				'seats': ['1A'],
				'totalPrice': 450,
			},
		).json()
		response = self.client.get(reverse('bookings:list'), {'reference': created['bookingReference']})
		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.json()['flightId'], 'FL001')

	def test_unknown_reference_returns_not_found(self) -> None:
		response = self.client.get(reverse('bookings:list'), {'reference': 'SK000000'})
		self.assertEqual(response.status_code, 404)

	def test_listing_without_bookings_is_empty(self) -> None:
		response = self.client.get(reverse('bookings:list'))
		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.json(), [])

	@mock.patch('core.models.current_millis', return_value=1_700_000_123_456)
	def test_reference_collision_picks_next_free_reference(self, _millis) -> None:
		first = create_booking(flight_id='FL001', passengers=[], seats=['1A'], total_price=Decimal('450'))
		second = create_booking(flight_id='FL001', passengers=[], seats=['1B'], total_price=Decimal('450'))
		self.assertEqual(first.reference, 'SK123456')
		self.assertEqual(second.reference, 'SK123457')
		self.assertEqual(len(get_repository('bookings')), 2)

	@mock.patch('core.models.current_millis', return_value=1_700_000_999_999)
	def test_reference_suffix_wraps_around(self, _millis) -> None:
		create_booking(flight_id='FL001', passengers=[], seats=[], total_price=Decimal('1'))
		wrapped = create_booking(flight_id='FL001', passengers=[], seats=[], total_price=Decimal('1'))
		self.assertEqual(wrapped.reference, 'SK000000')

	@mock.patch('core.models.current_millis', return_value=1_700_000_555_000)
	def test_concurrent_bookings_get_distinct_references(self, _millis) -> None:
		bookings = get_repository('bookings')
		get_repository('flights')
		workers = 8
		barrier = threading.Barrier(workers)
		references: list[str] = []

		def book() -> None:
			barrier.wait()
			booking = create_booking(
				flight_id='FL002', passengers=[], seats=[], total_price=Decimal('380'), repository=bookings,
			)
			references.append(booking.reference)

		threads = [threading.Thread(target=book) for _ in range(workers)]
		for thread in threads:
			thread.start()
		for thread in threads:
			thread.join()

		self.assertEqual(len(references), workers)
		self.assertEqual(len(set(references)), workers)
		self.assertEqual(len(bookings), workers)

	def test_passenger_entries_only_need_to_be_present(self) -> None:
		response = self.client.post(
			reverse('bookings:list'),
			{
				'flightId': 'FL001',
				'passengers': [{'name': 'A', 'passport': 'X1234567'}],
				'seats': ['1A'],
				'totalPrice': 450,
			},
		)
		self.assertEqual(response.status_code, 201)
		self.assertEqual(response.json()['passengers'], [{'name': 'A', 'email': ''}])
		self.assertEqual(len(mail.outbox), 0)

	def test_email_failure_keeps_booking(self) -> None:
		with mock.patch('django.core.mail.send_mail', side_effect=SMTPException('unavailable')):
			with self.assertLogs('flights.services', level='ERROR') as logs:
				response = self.client.post(
					reverse('bookings:list'),
					{
						'flightId': 'FL001',
						'passengers': [{'name': 'A', 'email': 'a@x.com'}],
						'seats': ['1A'],
						'totalPrice': 450,
					},
				)
		self.assertEqual(response.status_code, 201)
		reference = response.json()['bookingReference']
		self.assertIn(reference, logs.output[0])
		self.assertIn(reference, get_repository('bookings'))


class SeatMapTests(APISimpleTestCase):
	def setUp(self) -> None:
		reset_repositories()

	def test_seat_map_covers_layout(self) -> None:
		response = self.client.get(reverse('flights:seats', args=['FL001']))
		self.assertEqual(response.status_code, 200)
		seat_map = response.json()
		self.assertEqual(seat_map['rows'], 18)
		self.assertEqual(seat_map['seatLetters'], 'ABCDEF')
		self.assertEqual(len(seat_map['seats']), 18 * 6)
		self.assertTrue(set(seat_map['seats'].values()) <= {'available', 'occupied'})

	def test_seat_map_is_stable_between_views(self) -> None:
		first = self.client.get(reverse('flights:seats', args=['FL002'])).json()
		second = self.client.get(reverse('flights:seats', args=['FL002'])).json()
		self.assertEqual(first['seats'], second['seats'])

	@override_settings(SKYBOOK_SEAT_OCCUPANCY_RATE=0)
	def test_booked_seats_are_occupied(self) -> None:
		create_booking(flight_id='FL003', passengers=[], seats=['2C', '2D'], total_price=Decimal('1040'))
		seat_map = build_seat_map(get_flight('FL003'))
		self.assertEqual(seat_map.seats['2C'], 'occupied')
		self.assertEqual(seat_map.seats['2D'], 'occupied')
		self.assertEqual(seat_map.available_count, 18 * 6 - 2)

	@override_settings(SKYBOOK_SEAT_OCCUPANCY_RATE=0)
	def test_lowercase_booked_seat_is_occupied(self) -> None:
		response = self.client.post(
			reverse('bookings:list'),
			{'flightId': 'FL001', 'passengers': [], 'seats': [' 3a'], 'totalPrice': 450},
		)
		self.assertEqual(response.json()['seats'], ['3A'])
		self.assertEqual(build_seat_map(get_flight('FL001')).seats['3A'], 'occupied')

	@override_settings(SKYBOOK_SEAT_ROWS=2, SKYBOOK_SEAT_LETTERS='AB')
	def test_layout_follows_settings(self) -> None:
		self.assertEqual(SeatLayout.from_settings().seat_codes(), ['1A', '1B', '2A', '2B'])

	def test_unknown_flight_seat_map(self) -> None:
		response = self.client.get(reverse('flights:seats', args=['FL999']))
		self.assertEqual(response.status_code, 404)


@override_settings(SKYBOOK_SEAT_OCCUPANCY_RATE=0)
class BookingSessionTests(APISimpleTestCase):
	def setUp(self) -> None:
		reset_repositories()

	def start(self, passenger_count: int = 2) -> str:
		response = self.client.post(
			reverse('bookings:draft-create'),
			{'flightId': 'FL001', 'passengerCount': passenger_count},
		)
		self.assertEqual(response.status_code, 201)
		return response.json()['sessionId']

	def add_passengers(self, session_id: str) -> None:
		response = self.client.put(
			reverse('bookings:draft-passengers', args=[session_id]),
			{'passengers': [
				{'name': 'Alice', 'email': 'alice@example.com'},
				{'name': 'Bob', 'email': 'bob@example.com'},
			]},
		)
		self.assertEqual(response.status_code, 200)

	def test_full_booking_flow(self) -> None:
		session_id = self.start()
		self.add_passengers(session_id)
		response = self.client.put(reverse('bookings:draft-seats', args=[session_id]), {'seats': ['3a', '3B']})
		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.json()['step'], 'payment')

		seat_map = self.client.get(reverse('flights:seats', args=['FL001']), {'session': session_id}).json()
		self.assertEqual(seat_map['seats']['3A'], 'selected')

		response = self.client.post(reverse('bookings:draft-payment', args=[session_id]), VALID_CARD)
		self.assertEqual(response.status_code, 201)
		booking = response.json()
		self.assertEqual(booking['totalPrice'], 900)
		self.assertEqual(booking['seats'], ['3A', '3B'])
		self.assertEqual(booking['paymentStatus'], 'completed')
		self.assertTrue(booking['paymentReference'].startswith('test_'))
		self.assertEqual(sorted(mail.outbox[0].to), ['alice@example.com', 'bob@example.com'])

		response = self.client.get(reverse('bookings:draft-detail', args=[session_id]))
		self.assertEqual(response.status_code, 404)
		seat_map = self.client.get(reverse('flights:seats', args=['FL001'])).json()
		self.assertEqual(seat_map['seats']['3A'], 'occupied')

	def test_new_session_starts_at_passenger_step(self) -> None:
		session_id = self.start(1)
		draft = self.client.get(reverse('bookings:draft-detail', args=[session_id])).json()
		self.assertEqual(draft['step'], 'passengers')
		self.assertEqual(draft['passengerCount'], 1)
		self.assertEqual(draft['passengers'], [])

	def test_start_requires_known_flight(self) -> None:
		response = self.client.post(reverse('bookings:draft-create'), {'flightId': 'FL999'})
		self.assertEqual(response.status_code, 404)

	def test_start_rejects_passenger_count_out_of_range(self) -> None:
		response = self.client.post(reverse('bookings:draft-create'), {'flightId': 'FL001', 'passengerCount': 0})
		self.assertEqual(response.status_code, 400)

	def test_passenger_email_is_validated(self) -> None:
		session_id = self.start()
		response = self.client.put(
			reverse('bookings:draft-passengers', args=[session_id]),
			{'passengers': [
				{'name': 'Alice', 'email': 'alice@example.com'},
				{'name': 'Bob', 'email': 'bob.example.com'},
			]},
		)
		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.json()['message'], 'Please enter valid email for passenger 2')

	def test_passenger_name_is_required(self) -> None:
		with self.assertRaisesMessage(ValidationError, 'Please enter name for passenger 1'):
			drafts.set_passengers(self.start(1), [{'name': ' ', 'email': 'x@example.com'}])

	def test_seat_count_must_match_passengers(self) -> None:
		session_id = self.start()
		self.add_passengers(session_id)
		response = self.client.put(reverse('bookings:draft-seats', args=[session_id]), {'seats': ['1A']})
		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.json()['message'], 'Please select 2 seat(s)')

	def test_seats_require_passengers_first(self) -> None:
		session_id = self.start(1)
		response = self.client.put(reverse('bookings:draft-seats', args=[session_id]), {'seats': ['1A']})
		self.assertEqual(response.status_code, 400)

	def test_unknown_seat_is_rejected(self) -> None:
		session_id = self.start()
		self.add_passengers(session_id)
		response = self.client.put(reverse('bookings:draft-seats', args=[session_id]), {'seats': ['1A', '99Z']})
		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.json()['errors']['seats'], ['99Z'])

	def test_booked_seat_cannot_be_selected(self) -> None:
		create_booking(flight_id='FL001', passengers=[], seats=['5F'], total_price=Decimal('450'))
		session_id = self.start()
		self.add_passengers(session_id)
		with self.assertRaisesMessage(AvailabilityError, 'Seat 5F is no longer available'):
			drafts.select_seats(session_id, ['5E', '5F'])

	def test_payment_detects_seats_taken_after_selection(self) -> None:
		session_id = self.start()
		self.add_passengers(session_id)
		drafts.select_seats(session_id, ['7A', '7B'])
		create_booking(flight_id='FL001', passengers=[], seats=['7B'], total_price=Decimal('450'))

		response = self.client.post(reverse('bookings:draft-payment', args=[session_id]), VALID_CARD)
		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.json()['errors']['seats'], ['7B'])
		self.assertEqual(drafts.get_draft(session_id).step, 'seats')

	def test_email_failure_still_completes_payment(self) -> None:
		session_id = self.start()
		self.add_passengers(session_id)
		drafts.select_seats(session_id, ['4A', '4B'])

		with mock.patch('django.core.mail.send_mail', side_effect=SMTPException('unavailable')):
			with self.assertLogs('flights.services', level='ERROR'):
				response = self.client.post(reverse('bookings:draft-payment', args=[session_id]), VALID_CARD)
		self.assertEqual(response.status_code, 201)
		self.assertEqual(response.json()['seats'], ['4A', '4B'])
		self.assertEqual(len(get_repository('bookings')), 1)
		self.assertNotIn(session_id, get_repository('drafts'))

		retry = self.client.post(reverse('bookings:draft-payment', args=[session_id]), VALID_CARD)
		self.assertEqual(retry.status_code, 404)
		self.assertEqual(len(get_repository('bookings')), 1)

	def test_payment_requires_completed_steps(self) -> None:
		session_id = self.start(1)
		response = self.client.post(reverse('bookings:draft-payment', args=[session_id]), VALID_CARD)
		self.assertEqual(response.status_code, 400)

	def test_invalid_card_keeps_session(self) -> None:
		session_id = self.start()
		self.add_passengers(session_id)
		drafts.select_seats(session_id, ['9A', '9B'])
		response = self.client.post(
			reverse('bookings:draft-payment', args=[session_id]),
			{**VALID_CARD, 'cvv': '12'},
		)
		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.json()['message'], 'Please enter a valid 3-digit CVV')
		self.assertEqual(len(get_repository('bookings')), 0)
		self.assertEqual(drafts.get_draft(session_id).seats, ['9A', '9B'])

	def test_session_can_be_discarded(self) -> None:
		session_id = self.start(1)
		response = self.client.delete(reverse('bookings:draft-detail', args=[session_id]))
		self.assertEqual(response.status_code, 204)
		with self.assertRaises(NotFound):
			drafts.get_draft(session_id)

	@override_settings(SKYBOOK_DRAFT_TTL_MINUTES=0)
	def test_expired_session_is_not_found(self) -> None:
		session_id = self.start(1)
		response = self.client.get(reverse('bookings:draft-detail', args=[session_id]))
		self.assertEqual(response.status_code, 404)
		self.assertIn('expired', response.json()['message'])
