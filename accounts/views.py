"""Views handling account registration and login."""

from __future__ import annotations

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from core.views import validated_data

from .serializers import LoginSerializer, RegisteredUserSerializer, SignupSerializer, UserSerializer
from .services import login_user, register_user, signup_user


class UserLoginView(APIView):

	def post(self, request: Request) -> Response:
		data = validated_data(LoginSerializer, request.data, 'Email and password are required')
		user, token = login_user(email=data['email'], password=data['password'])
		return Response({'user': UserSerializer(user).data, 'token': token})


class SignupView(APIView):

	def post(self, request: Request) -> Response:
		data = validated_data(SignupSerializer, request.data, 'Name, email, and password are required')
		user, token = signup_user(name=data['name'], email=data['email'], password=data['password'])
		return Response(
			{'user': UserSerializer(user).data, 'token': token},
			status=status.HTTP_201_CREATED,
		)


class RegisterView(APIView):

	def post(self, request: Request) -> Response:
		data = validated_data(SignupSerializer, request.data, 'Missing required fields')
		user = register_user(email=data['email'], password=data['password'], name=data['name'])
		return Response(RegisteredUserSerializer(user).data)
