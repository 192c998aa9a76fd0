"""Registration, login and token helpers for the account directory.

Passwords are only base64-obfuscated and tokens are opaque base64 strings that
no endpoint verifies. Neither is a security mechanism.
"""

from __future__ import annotations

import logging
import uuid

from django.conf import settings
from django.utils.crypto import constant_time_compare
from django.utils.encoding import force_bytes
from django.utils.http import urlsafe_base64_encode

from core.exceptions import AuthenticationFailed, Conflict
from core.models import current_millis
from core.repositories import Repository, get_repository

from .models import User, normalize_email

logger = logging.getLogger(__name__)

DEMO_USERS: tuple[dict[str, str], ...] = (
    {'name': 'John Doe', 'email': 'john@example.com', 'password': 'password123'},
    {'name': 'Jane Smith', 'email': 'jane@example.com', 'password': 'password123'},
)


def _users(repository: Repository | None) -> Repository:
    return repository if repository is not None else get_repository('users')


def obfuscate_password(password: str) -> str:
    return urlsafe_base64_encode(force_bytes(password))


def verify_password(password: str, stored: str) -> bool:
    return constant_time_compare(obfuscate_password(password), stored)


def generate_token(user: User) -> str:
    return urlsafe_base64_encode(force_bytes(f'{user.id}:{user.email}:{current_millis()}'))


def find_user_by_email(email: str, *, repository: Repository | None = None) -> User | None:
    key = normalize_email(email)
    return _users(repository).find(lambda user: user.email_key == key)


def register_user(
    *,
    email: str,
    password: str,
    name: str,
    repository: Repository | None = None,
) -> User:
    users = _users(repository)
    email = email.strip()
    with users.atomic():
        if find_user_by_email(email, repository=users) is not None:
            raise Conflict('User already exists')
        user = User(
            id=f'user_{uuid.uuid4().hex[:12]}',
            email=email,
            name=name.strip(),
            password=obfuscate_password(password),
        )
        users.add(user.id, user)
    logger.info('Registered user %s', user.id)
    return user


def signup_user(
    *,
    name: str,
    email: str,
    password: str,
    repository: Repository | None = None,
) -> tuple[User, str]:
    user = register_user(email=email, password=password, name=name, repository=repository)
    return user, generate_token(user)


def login_user(*, email: str, password: str, repository: Repository | None = None) -> tuple[User, str]:
    user = find_user_by_email(email, repository=repository)
    # Same error for unknown email and wrong password.
    if user is None or not verify_password(password, user.password):
        logger.info('Failed login attempt')
        raise AuthenticationFailed('Invalid email or password')
    return user, generate_token(user)


def seed_demo_users(repository: Repository) -> None:
    if not getattr(settings, 'SKYBOOK_SEED_DEMO_USERS', False):
        return
    for demo in DEMO_USERS:
        register_user(repository=repository, **demo)
