from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import User
from bookings.models import Booking
from bookings.services.booking_reader import DjangoBookingReader
from core.errors import ErrorKind, NotFound
from courts.models import Court, Slot
from payments.models import Payment


@pytest.fixture
def client():
    return APIClient()


@pytest.fixture
def player(db):
    return User.objects.create_user(
        username="player@example.com",
        email="player@example.com",
        password="password123",
    )


@pytest.fixture
def other_player(db):
    return User.objects.create_user(
        username="rival@example.com",
        email="rival@example.com",
        password="password123",
    )


@pytest.fixture
def operator(db):
    return User.objects.create_user(
        username="operator@example.com",
        email="operator@example.com",
        password="password123",
        role=User.OPERATOR,
    )


@pytest.fixture
def court(db):
    return Court.objects.create(name="Center Court", location="North Wing", min_down_payment=20)


def _make_slot(court, offset_hours: int = 0, price: str = "1000.00") -> Slot:
    start = (timezone.now() + timedelta(days=2)).replace(minute=0, second=0, microsecond=0)
    start += timedelta(hours=offset_hours)
    return Slot.objects.create(
        court=court,
        start=start,
        end=start + timedelta(hours=1),
        price=Decimal(price),
    )


def test_player_books_slot_at_slot_price(client, player, court):
    slot = _make_slot(court, price="750.00")
    client.force_authenticate(user=player)

    response = client.post("/api/bookings/", {"slot_id": slot.id}, format="json")

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == Booking.NOT_CONFIRMED
    assert Decimal(data["total_amount"]) == Decimal("750.00")
    assert Decimal(data["paid_amount"]) == Decimal("0.00")
    assert data["payments"] == []
    booking = Booking.objects.get(pk=data["id"])
    assert booking.user == player


def test_booking_an_already_booked_slot_conflicts(client, player, other_player, court):
    slot = _make_slot(court)
    Booking.objects.create(user=other_player, slot=slot, total_amount=slot.price)
    client.force_authenticate(user=player)

    response = client.post("/api/bookings/", {"slot_id": slot.id}, format="json")

    assert response.status_code == 409
    assert response.json()["code"] == "conflict"
    assert Booking.objects.filter(slot=slot).count() == 1


def test_inactive_slot_cannot_be_booked(client, player, court):
    slot = _make_slot(court)
    slot.is_active = False
    slot.save()
    client.force_authenticate(user=player)

    response = client.post("/api/bookings/", {"slot_id": slot.id}, format="json")

    assert response.status_code == 400
    assert "slot_id" in response.json()


def test_booking_requires_authentication(client, court):
    slot = _make_slot(court)

    response = client.post("/api/bookings/", {"slot_id": slot.id}, format="json")

    assert response.status_code == 401


def test_players_only_list_their_own_bookings(client, player, other_player, court):
    mine = Booking.objects.create(user=player, slot=_make_slot(court, 0), total_amount=Decimal("1000.00"))
    Booking.objects.create(user=other_player, slot=_make_slot(court, 1), total_amount=Decimal("1000.00"))
    client.force_authenticate(user=player)

    response = client.get("/api/bookings/")

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 1
    assert [item["id"] for item in body["results"]] == [mine.id]


def test_operator_lists_all_bookings_with_limit(client, operator, player, court):
    for offset in range(3):
        Booking.objects.create(
            user=player,
            slot=_make_slot(court, offset),
            total_amount=Decimal("1000.00"),
        )
    client.force_authenticate(user=operator)

    response = client.get("/api/bookings/", {"limit": 2})

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 3
    assert len(body["results"]) == 2
    assert body["next"] is not None


def test_bookings_filter_by_status(client, operator, player, court):
    Booking.objects.create(user=player, slot=_make_slot(court, 0), total_amount=Decimal("1000.00"))
    confirmed = Booking.objects.create(
        user=player,
        slot=_make_slot(court, 1),
        total_amount=Decimal("1000.00"),
        status=Booking.CONFIRMED,
    )
    client.force_authenticate(user=operator)

    response = client.get("/api/bookings/", {"status": Booking.CONFIRMED})

    assert response.status_code == 200
    assert [item["id"] for item in response.json()["results"]] == [confirmed.id]


def test_booking_detail_includes_payments(client, player, court):
    booking = Booking.objects.create(user=player, slot=_make_slot(court), total_amount=Decimal("1000.00"))
    Payment.objects.create(
        booking=booking,
        payment_amount=Decimal("300.00"),
        payment_method=Payment.BANK_TRANSFER,
    )
    client.force_authenticate(user=player)

    response = client.get(f"/api/bookings/{booking.id}/")

    assert response.status_code == 200
    data = response.json()
    assert Decimal(data["remaining_amount"]) == Decimal("1000.00")
    assert len(data["payments"]) == 1
    assert data["payments"][0]["payment_status"] == Payment.NOT_PAID


def test_other_players_booking_is_hidden(client, player, other_player, court):
    booking = Booking.objects.create(user=other_player, slot=_make_slot(court), total_amount=Decimal("1000.00"))
    client.force_authenticate(user=player)

    response = client.get(f"/api/bookings/{booking.id}/")

    assert response.status_code == 404


def test_booking_reader_returns_financials(player, court):
    booking = Booking.objects.create(
        user=player,
        slot=_make_slot(court),
        total_amount=Decimal("1000.00"),
        paid_amount=Decimal("300.00"),
    )
    Payment.objects.create(
        booking=booking,
        payment_amount=Decimal("300.00"),
        payment_method=Payment.CASH_DEPOSIT,
        payment_status=Payment.PAID,
    )

    details = DjangoBookingReader().get_booking_details(booking.id)

    assert details.id == booking.id
    assert details.user_id == player.id
    assert details.total_amount == Decimal("1000.00")
    assert details.paid_amount == Decimal("300.00")
    assert details.min_down_payment == 20
    assert [p.payment_status for p in details.payments] == [Payment.PAID]


@pytest.mark.django_db
@pytest.mark.parametrize("booking_id", [999999, "not-a-number"])
def test_booking_reader_raises_not_found(booking_id):
    with pytest.raises(NotFound) as excinfo:
        DjangoBookingReader().get_booking_details(booking_id)

    assert excinfo.value.kind is ErrorKind.NOT_FOUND
