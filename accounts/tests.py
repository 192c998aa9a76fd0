import base64

from django.test import override_settings
from django.urls import reverse
from rest_framework.test import APISimpleTestCase

from core.exceptions import Conflict
from core.repositories import get_repository, reset_repositories

from .services import find_user_by_email, obfuscate_password, register_user, verify_password


def decode_token(token: str) -> str:
	padded = token + '=' * (-len(token) % 4)
	return base64.urlsafe_b64decode(padded).decode()


class RegistrationTests(APISimpleTestCase):
	def setUp(self) -> None:
		reset_repositories()

	def test_register_returns_user_without_password(self) -> None:
		response = self.client.post(
			reverse('accounts:register'),
			{'email': 'alice@example.com', 'password': 'pw123', 'name': 'Alice'},
		)
		self.assertEqual(response.status_code, 200)
		body = response.json()
		self.assertEqual(set(body), {'id', 'email', 'name'})
		self.assertTrue(body['id'].startswith('user_'))
		self.assertEqual(body['email'], 'alice@example.com')

	def test_register_same_email_twice_fails(self) -> None:
		payload = {'email': 'alice@example.com', 'password': 'pw123', 'name': 'Alice'}
		self.assertEqual(self.client.post(reverse('accounts:register'), payload).status_code, 200)
		response = self.client.post(reverse('accounts:register'), payload)
		self.assertEqual(response.status_code, 400)
		self.assertIn('already exists', response.json()['message'])
		self.assertEqual(len(get_repository('users')), 1)

	def test_email_uniqueness_ignores_case(self) -> None:
		register_user(email='alice@example.com', password='pw123', name='Alice')
		with self.assertRaisesMessage(Conflict, 'User already exists'):
			register_user(email='Alice@Example.com', password='other', name='Alice Again')

	def test_register_requires_all_fields(self) -> None:
		response = self.client.post(reverse('accounts:register'), {'email': 'alice@example.com', 'password': 'pw123'})
		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.json()['message'], 'Missing required fields')

	def test_password_is_stored_obfuscated(self) -> None:
		user = register_user(email='bob@example.com', password='secret', name='Bob')
		self.assertNotEqual(user.password, 'secret')
		self.assertEqual(user.password, obfuscate_password('secret'))
		self.assertTrue(verify_password('secret', user.password))
		self.assertFalse(verify_password('Secret', user.password))

	def test_signup_returns_user_and_token(self) -> None:
		response = self.client.post(
			reverse('accounts:signup'),
			{'name': 'Carol', 'email': 'carol@example.com', 'password': 'pw123'},
		)
		self.assertEqual(response.status_code, 201)
		body = response.json()
		self.assertNotIn('password', body['user'])
		self.assertEqual(body['user']['name'], 'Carol')
		user_id, email, issued_at = decode_token(body['token']).split(':')
		self.assertEqual(user_id, body['user']['id'])
		self.assertEqual(email, 'carol@example.com')
		self.assertTrue(issued_at.isdigit())

	def test_signup_duplicate_email(self) -> None:
		register_user(email='carol@example.com', password='pw123', name='Carol')
		response = self.client.post(
			reverse('accounts:signup'),
			{'name': 'Carol', 'email': 'carol@example.com', 'password': 'pw123'},
		)
		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.json()['message'], 'User already exists')

	def test_signup_missing_fields(self) -> None:
		response = self.client.post(reverse('accounts:signup'), {'email': 'carol@example.com'})
		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.json()['message'], 'Name, email, and password are required')


class LoginTests(APISimpleTestCase):
	def setUp(self) -> None:
		reset_repositories()
		register_user(email='alice@example.com', password='pw123', name='Alice')

	def test_login_success(self) -> None:
		response = self.client.post(reverse('accounts:login'), {'email': 'alice@example.com', 'password': 'pw123'})
		self.assertEqual(response.status_code, 200)
		body = response.json()
		self.assertEqual(body['user']['email'], 'alice@example.com')
		self.assertNotIn('password', body['user'])
		self.assertTrue(body['token'])

	def test_wrong_password_and_unknown_email_look_the_same(self) -> None:
		wrong_password = self.client.post(
			reverse('accounts:login'),
			{'email': 'alice@example.com', 'password': 'nope'},
		)
		unknown_email = self.client.post(
			reverse('accounts:login'),
			{'email': 'nobody@example.com', 'password': 'pw123'},
		)
		self.assertEqual(wrong_password.status_code, 401)
		self.assertEqual(unknown_email.status_code, 401)
		self.assertEqual(wrong_password.json(), unknown_email.json())
		self.assertEqual(wrong_password.json()['message'], 'Invalid email or password')

	def test_login_requires_email_and_password(self) -> None:
		response = self.client.post(reverse('accounts:login'), {'email': 'alice@example.com'})
		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.json()['message'], 'Email and password are required')

	def test_find_user_by_email_ignores_surrounding_whitespace(self) -> None:
		self.assertIsNotNone(find_user_by_email('  ALICE@example.com '))


class DemoUserTests(APISimpleTestCase):

	@override_settings(SKYBOOK_SEED_DEMO_USERS=True)
	def test_demo_users_can_log_in(self) -> None:
		response = self.client.post(
			reverse('accounts:login'),
			{'email': 'john@example.com', 'password': 'password123'},
		)
		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.json()['user']['name'], 'John Doe')

	@override_settings(SKYBOOK_SEED_DEMO_USERS=False)
	def test_demo_users_not_seeded_when_disabled(self) -> None:
		self.assertIsNone(find_user_by_email('jane@example.com'))
