"""JSON representations for flights, seat maps and bookings."""

from __future__ import annotations

from rest_framework import serializers


class FlightSerializer(serializers.Serializer):
    id = serializers.CharField()
    airline = serializers.CharField()
    flightNumber = serializers.CharField(source='flight_number')
    to = serializers.CharField(source='destination')
    departureTime = serializers.CharField(source='departure_time')
    arrivalTime = serializers.CharField(source='arrival_time')
    duration = serializers.CharField()
    price = serializers.DecimalField(max_digits=9, decimal_places=2)
    availableSeats = serializers.IntegerField(source='available_seats')
    totalSeats = serializers.IntegerField(source='total_seats')

    def get_fields(self):
        # ``from`` is a keyword and cannot be declared as a class attribute.
        fields = {}
        for name, field in super().get_fields().items():
            if name == 'to':
                fields['from'] = serializers.CharField(source='origin')
            fields[name] = field
        return fields


class SeatMapSerializer(serializers.Serializer):
    flightId = serializers.CharField(source='flight_id')
    rows = serializers.IntegerField()
    seatLetters = serializers.CharField(source='letters')
    availableCount = serializers.IntegerField(source='available_count')
    seats = serializers.DictField(child=serializers.CharField())


class PassengerSerializer(serializers.Serializer):
    name = serializers.CharField(allow_blank=True, required=False, default='')
    email = serializers.CharField(allow_blank=True, required=False, default='')


class BookingSerializer(serializers.Serializer):
    id = serializers.CharField()
    bookingReference = serializers.CharField(source='reference')
    flightId = serializers.CharField(source='flight_id')
    passengers = PassengerSerializer(many=True)
    seats = serializers.ListField(child=serializers.CharField())
    totalPrice = serializers.DecimalField(source='total_price', max_digits=10, decimal_places=2)
    bookingDate = serializers.DateTimeField(source='booking_date')
    paymentStatus = serializers.CharField(source='payment_status')
    paymentReference = serializers.CharField(source='payment_reference')


class BookingCreateSerializer(serializers.Serializer):
    flightId = serializers.CharField()
    passengers = PassengerSerializer(many=True, allow_empty=True)
    seats = serializers.ListField(child=serializers.CharField(), allow_empty=True)
    totalPrice = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)


class DraftStartSerializer(serializers.Serializer):
    flightId = serializers.CharField()
    passengerCount = serializers.IntegerField(required=False, default=1)


class DraftPassengersSerializer(serializers.Serializer):
    passengers = serializers.ListField(child=serializers.DictField(), allow_empty=True)


class DraftSeatsSerializer(serializers.Serializer):
    seats = serializers.ListField(child=serializers.CharField(), allow_empty=True)


class DraftBookingSerializer(serializers.Serializer):
    sessionId = serializers.CharField(source='session_id')
    flightId = serializers.CharField(source='flight_id')
    passengerCount = serializers.IntegerField(source='passenger_count')
    passengers = PassengerSerializer(many=True)
    seats = serializers.ListField(child=serializers.CharField())
    step = serializers.CharField()
    createdAt = serializers.DateTimeField(source='created_at')
    expiresAt = serializers.DateTimeField(source='expires_at')
