"""Core site-wide views and request helpers."""

from __future__ import annotations

from typing import Any

from rest_framework import serializers
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from .exceptions import ValidationError
from .repositories import get_repository


def validated_data(serializer_class: type[serializers.Serializer], data: Any, message: str) -> dict[str, Any]:
	"""Validate ``data`` or raise a 400 carrying ``message`` and the field errors."""

	serializer = serializer_class(data=data)
	if not serializer.is_valid():
		raise ValidationError(message, errors=serializer.errors)
	return serializer.validated_data


class HealthCheckView(APIView):

	def get(self, request: Request) -> Response:
		return Response({
			'status': 'ok',
			'service': 'skybook',
			'flights': len(get_repository('flights')),
		})
