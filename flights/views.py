"""Flight search, seat map and booking API views."""

from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import ValidationError
from core.views import validated_data

from . import drafts
from .serializers import (
    BookingCreateSerializer,
    BookingSerializer,
    DraftBookingSerializer,
    DraftPassengersSerializer,
    DraftSeatsSerializer,
    DraftStartSerializer,
    FlightSerializer,
    SeatMapSerializer,
)
from .services import (
    build_seat_map,
    create_booking,
    get_booking,
    get_flight,
    list_bookings,
    search_flights,
)

logger = logging.getLogger(__name__)


class FlightSearchView(APIView):

    def get(self, request: Request) -> Response:
        flights = search_flights(
            origin=request.query_params.get('from'),
            destination=request.query_params.get('to'),
        )
        return Response(FlightSerializer(flights, many=True).data)


class FlightDetailView(APIView):

    def get(self, request: Request, flight_id: str) -> Response:
        return Response(FlightSerializer(get_flight(flight_id)).data)


class FlightSeatMapView(APIView):

    def get(self, request: Request, flight_id: str) -> Response:
        flight = get_flight(flight_id)
        draft = None
        session_id = request.query_params.get('session')
        if session_id:
            draft = drafts.get_draft(session_id)
        return Response(SeatMapSerializer(build_seat_map(flight, draft=draft)).data)


class BookingListCreateView(APIView):

    def get(self, request: Request) -> Response:
        reference = request.query_params.get('reference')
        if reference:
            return Response(BookingSerializer(get_booking(reference)).data)
        return Response(BookingSerializer(list_bookings(), many=True).data)

    def post(self, request: Request) -> Response:
        data = validated_data(BookingCreateSerializer, request.data, 'Missing required fields')
        booking = create_booking(
            flight_id=data['flightId'],
            passengers=data['passengers'],
            seats=data['seats'],
            total_price=data['totalPrice'],
        )
        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)


class DraftCreateView(APIView):

    def post(self, request: Request) -> Response:
        data = validated_data(DraftStartSerializer, request.data, 'Missing required fields')
        draft = drafts.start_draft(flight_id=data['flightId'], passenger_count=data['passengerCount'])
        return Response(DraftBookingSerializer(draft).data, status=status.HTTP_201_CREATED)


class DraftDetailView(APIView):

    def get(self, request: Request, session_id: str) -> Response:
        return Response(DraftBookingSerializer(drafts.get_draft(session_id)).data)

    def delete(self, request: Request, session_id: str) -> Response:
        drafts.get_draft(session_id)
        drafts.discard_draft(session_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class DraftPassengersView(APIView):

    def put(self, request: Request, session_id: str) -> Response:
        data = validated_data(DraftPassengersSerializer, request.data, 'Passenger details are required')
        draft = drafts.set_passengers(session_id, data['passengers'])
        return Response(DraftBookingSerializer(draft).data)


class DraftSeatsView(APIView):

    def put(self, request: Request, session_id: str) -> Response:
        data = validated_data(DraftSeatsSerializer, request.data, 'Seat selection is required')
        draft = drafts.select_seats(session_id, data['seats'])
        return Response(DraftBookingSerializer(draft).data)


class DraftPaymentView(APIView):

    def post(self, request: Request, session_id: str) -> Response:
        if not isinstance(request.data, dict):
            raise ValidationError('Payment details are required')
        booking = drafts.pay_draft(session_id, request.data)
        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)
