import importlib
import os
from unittest import mock

from django.core.exceptions import ImproperlyConfigured
from django.test import override_settings
from django.urls import reverse
from rest_framework.test import APISimpleTestCase

from .exceptions import Conflict
from .models import candidate_references, generate_reference
from .repositories import InMemoryRepository, Repository, get_repository, reset_repositories


class RecordingRepository(InMemoryRepository):
	"""Fake store that remembers every key written."""

	def __init__(self, alias: str = '') -> None:
		super().__init__(alias)
		self.writes: list[str] = []

	def add(self, key, item):
		self.writes.append(key)
		return super().add(key, item)


class ReferenceTests(APISimpleTestCase):

	def test_reference_uses_last_six_digits(self) -> None:
		self.assertEqual(generate_reference('SK', millis=1_734_567_890_123), 'SK890123')
		self.assertEqual(generate_reference('SK', millis=42), 'SK000042')

	@override_settings(SKYBOOK_BOOKING_REFERENCE_PREFIX='ZZ')
	def test_prefix_comes_from_settings(self) -> None:
		self.assertEqual(generate_reference(millis=1), 'ZZ000001')

	def test_candidates_start_at_timestamp(self) -> None:
		candidates = candidate_references('SK', millis=999_998)
		self.assertEqual([next(candidates) for _ in range(3)], ['SK999998', 'SK999999', 'SK000000'])


class InMemoryRepositoryTests(APISimpleTestCase):

	def test_add_rejects_existing_key(self) -> None:
		repository = InMemoryRepository('things')
		repository.add('a', 1)
		with self.assertRaises(Conflict):
			repository.add('a', 2)
		self.assertEqual(repository.get('a'), 1)

	def test_save_delete_and_lookup(self) -> None:
		repository = InMemoryRepository('things')
		repository.save('a', 1)
		repository.save('a', 3)
		repository.save('b', 2)
		self.assertEqual(repository.all(), [3, 2])
		self.assertIn('a', repository)
		self.assertEqual(repository.find(lambda item: item == 2), 2)
		self.assertEqual(repository.filter(lambda item: item > 5), [])
		self.assertTrue(repository.delete('a'))
		self.assertFalse(repository.delete('a'))
		self.assertEqual(len(repository), 1)

	def test_add_first_free_skips_taken_keys(self) -> None:
		repository = InMemoryRepository('things')
		repository.add('k1', 'taken')
		stored = repository.add_first_free(['k1', 'k2', 'k3'], lambda key: f'value-{key}')
		self.assertEqual(stored, 'value-k2')

	def test_add_first_free_exhausted(self) -> None:
		repository = InMemoryRepository('things')
		repository.add('k1', 'taken')
		with self.assertRaises(Conflict):
			repository.add_first_free(['k1'], lambda key: key)


class RepositoryRegistryTests(APISimpleTestCase):
	def setUp(self) -> None:
		reset_repositories()

	def test_registry_returns_same_instance(self) -> None:
		self.assertIs(get_repository('bookings'), get_repository('bookings'))

	def test_flights_repository_is_seeded(self) -> None:
		self.assertIsNotNone(get_repository('flights').get('FL001'))

	def test_reset_gives_fresh_store(self) -> None:
		get_repository('bookings').add('SK000001', object())
		reset_repositories()
		self.assertEqual(len(get_repository('bookings')), 0)

	def test_backend_can_be_substituted(self) -> None:
		with override_settings(SKYBOOK_REPOSITORIES={
			'bookings': {'BACKEND': 'core.tests.RecordingRepository'},
			'flights': {'BACKEND': 'core.repositories.InMemoryRepository', 'SEED': 'flights.inventory.seed_flights'},
		}):
			response = self.client.post(
				reverse('bookings:list'),
				{'flightId': 'FL001', 'passengers': [], 'seats': ['1A'], 'totalPrice': 450},
			)
			repository = get_repository('bookings')
			self.assertIsInstance(repository, RecordingRepository)
			self.assertEqual(repository.writes, [response.json()['bookingReference']])

	def test_unknown_alias_is_misconfiguration(self) -> None:
		with self.assertRaises(ImproperlyConfigured):
			get_repository('hotels')

	def test_in_memory_backend_is_a_repository(self) -> None:
		self.assertIsInstance(get_repository('users'), Repository)


class ErrorHandlingTests(APISimpleTestCase):
	def setUp(self) -> None:
		reset_repositories()

	def test_health_check(self) -> None:
		response = self.client.get(reverse('health'))
		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.json()['status'], 'ok')

	def test_malformed_json_returns_message(self) -> None:
		response = self.client.post(
			reverse('bookings:list'),
			data='{"flightId": ',
			content_type='application/json',
		)
		self.assertEqual(response.status_code, 400)
		self.assertIn('message', response.json())

	def test_unexpected_error_is_logged_and_hidden(self) -> None:
		with mock.patch('flights.views.list_bookings', side_effect=RuntimeError('boom')):
			with self.assertLogs('core.exceptions', level='ERROR') as logs:
				response = self.client.get(reverse('bookings:list'))
		self.assertEqual(response.status_code, 500)
		self.assertEqual(response.json(), {'message': 'Internal server error'})
		self.assertIn('BookingListCreateView', logs.output[0])

	def test_method_not_allowed_uses_message_body(self) -> None:
		response = self.client.delete(reverse('flights:search'))
		self.assertEqual(response.status_code, 405)
		self.assertIn('not allowed', response.json()['message'])


class DeploymentSettingsTests(APISimpleTestCase):

	def test_deployment_settings_disable_debug(self) -> None:
		env = {'DJANGO_SECRET_KEY': 'prod-secret', 'WEBSITE_HOSTNAME': 'skybook.example.com'}
		with mock.patch.dict(os.environ, env):
			module = importlib.reload(importlib.import_module('skybook.settings_deployment'))
		self.assertFalse(module.DEBUG)
		self.assertEqual(module.SECRET_KEY, 'prod-secret')
		self.assertEqual(module.ALLOWED_HOSTS, ['skybook.example.com'])
		self.assertFalse(module.SKYBOOK_SEED_DEMO_USERS)
