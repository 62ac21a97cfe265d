import io
from datetime import timedelta
from decimal import Decimal

import pytest
from django.core.files.storage import FileSystemStorage
from django.core.files.uploadedfile import SimpleUploadedFile
from django.utils import timezone
from PIL import Image
from rest_framework.test import APIClient

from accounts.models import User
from bookings.models import Booking
from bookings.services.booking_reader import DjangoBookingReader
from courts.models import Court, Slot
from payments import api as payments_api
from payments.models import Payment
from payments.services.records import PaymentRecordManager
from payments.services.uploads import StorageUploadStore


def _proof_file(name: str = "receipt.png") -> SimpleUploadedFile:
    buffer = io.BytesIO()
    image = Image.new("RGB", (32, 32), color="green")
    image.save(buffer, format="PNG")
    buffer.seek(0)
    return SimpleUploadedFile(name, buffer.read(), content_type="image/png")


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
def stranger(db):
    return User.objects.create_user(
        username="stranger@example.com",
        email="stranger@example.com",
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
def booking(player):
    court = Court.objects.create(name="Center Court", location="North Wing", min_down_payment=20)
    start = (timezone.now() + timedelta(days=2)).replace(minute=0, second=0, microsecond=0)
    slot = Slot.objects.create(court=court, start=start, end=start + timedelta(hours=1), price=Decimal("1000.00"))
    return Booking.objects.create(user=player, slot=slot, total_amount=slot.price)


@pytest.fixture
def payment(booking):
    return Payment.objects.create(
        booking=booking,
        payment_amount=Decimal("300.00"),
        payment_method=Payment.BANK_TRANSFER,
    )


def test_full_payment_flow(settings, tmp_path, client, player, operator, booking):
    settings.MEDIA_ROOT = tmp_path
    client.force_authenticate(user=player)

    created = client.post(
        "/api/payments/",
        {"booking_id": booking.id, "payment_amount": "300.00", "payment_method": Payment.BANK_TRANSFER},
        format="json",
    )
    assert created.status_code == 201
    payment_id = created.json()["id"]
    assert created.json()["payment_status"] == Payment.NOT_PAID

    uploaded = client.post(
        f"/api/payments/{payment_id}/image/",
        {"image": _proof_file()},
        format="multipart",
    )
    assert uploaded.status_code == 200
    assert uploaded.json()["payment_status"] == Payment.VERIFICATION_PENDING
    stored_name = Payment.objects.get(pk=payment_id).payment_image_link
    assert stored_name.startswith("payment-proofs/")
    assert (tmp_path / stored_name).exists()

    fetched = client.get(f"/api/payments/{payment_id}/")
    assert fetched.status_code == 200
    assert fetched.json()["payment_image_link"].startswith(settings.MEDIA_URL)

    client.force_authenticate(user=operator)
    verified = client.post(f"/api/payments/{payment_id}/verify/")
    assert verified.status_code == 200
    body = verified.json()
    assert body["success"] is True
    assert body["message"] == "Payment verified successfully"
    assert body["payment"]["payment_status"] == Payment.PAID
    assert body["booking"]["status"] == Booking.CONFIRMED
    assert Decimal(body["booking"]["paid_amount"]) == Decimal("300.00")

    client.force_authenticate(user=player)
    balance = client.post(
        "/api/payments/",
        {"booking_id": booking.id, "payment_amount": "700.00", "payment_method": Payment.MOBILE_WALLET},
        format="json",
    )
    assert balance.status_code == 201
    balance_id = balance.json()["id"]

    uploaded = client.post(
        f"/api/payments/{balance_id}/image/",
        {"image": _proof_file("balance.png")},
        format="multipart",
    )
    assert uploaded.status_code == 200
    assert uploaded.json()["payment_status"] == Payment.VERIFICATION_PENDING

    client.force_authenticate(user=operator)
    verified = client.post(f"/api/payments/{balance_id}/verify/")
    assert verified.status_code == 200
    assert verified.json()["booking"]["status"] == Booking.COMPLETED

    booking.refresh_from_db()
    assert booking.paid_amount == Decimal("1000.00")
    assert booking.status == Booking.COMPLETED


def test_create_below_down_payment_returns_400(client, player, booking):
    client.force_authenticate(user=player)

    response = client.post(
        "/api/payments/",
        {"booking_id": booking.id, "payment_amount": "150.00", "payment_method": Payment.BANK_TRANSFER},
        format="json",
    )

    assert response.status_code == 400
    assert response.json()["code"] == "bad_request"


def test_create_with_pending_payment_returns_409(client, player, booking, payment):
    client.force_authenticate(user=player)

    response = client.post(
        "/api/payments/",
        {"booking_id": booking.id, "payment_amount": "300.00", "payment_method": Payment.BANK_TRANSFER},
        format="json",
    )

    assert response.status_code == 409


def test_create_for_someone_elses_booking_returns_403(client, stranger, booking):
    client.force_authenticate(user=stranger)

    response = client.post(
        "/api/payments/",
        {"booking_id": booking.id, "payment_amount": "300.00", "payment_method": Payment.BANK_TRANSFER},
        format="json",
    )

    assert response.status_code == 403


def test_create_rejects_unknown_method(client, player, booking):
    client.force_authenticate(user=player)

    response = client.post(
        "/api/payments/",
        {"booking_id": booking.id, "payment_amount": "300.00", "payment_method": "barter"},
        format="json",
    )

    assert response.status_code == 400
    assert "payment_method" in response.json()


def test_update_payment(client, player, booking, payment):
    client.force_authenticate(user=player)

    response = client.patch(
        f"/api/payments/{payment.id}/",
        {"payment_amount": "450.00", "payment_method": Payment.MOBILE_WALLET, "booking_id": booking.id},
        format="json",
    )

    assert response.status_code == 200
    assert Decimal(response.json()["payment_amount"]) == Decimal("450.00")


def test_update_paid_payment_returns_409(client, player, payment):
    payment.payment_status = Payment.PAID
    payment.save()
    client.force_authenticate(user=player)

    response = client.patch(
        f"/api/payments/{payment.id}/",
        {"payment_amount": "450.00", "payment_method": Payment.MOBILE_WALLET},
        format="json",
    )

    assert response.status_code == 409


def test_stranger_cannot_update_payment(client, stranger, payment):
    client.force_authenticate(user=stranger)

    response = client.patch(
        f"/api/payments/{payment.id}/",
        {"payment_amount": "450.00", "payment_method": Payment.MOBILE_WALLET},
        format="json",
    )

    assert response.status_code == 403
    payment.refresh_from_db()
    assert payment.payment_amount == Decimal("300.00")


def test_stranger_cannot_view_payment(client, stranger, payment):
    client.force_authenticate(user=stranger)

    response = client.get(f"/api/payments/{payment.id}/")

    assert response.status_code == 403


def test_unknown_payment_returns_404(client, player, db):
    client.force_authenticate(user=player)

    response = client.get("/api/payments/424242/")

    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


def test_player_cannot_verify(client, player, payment):
    client.force_authenticate(user=player)

    response = client.post(f"/api/payments/{payment.id}/verify/")

    assert response.status_code == 403
    payment.refresh_from_db()
    assert payment.payment_status == Payment.NOT_PAID


def test_double_verification_returns_409(client, operator, payment):
    client.force_authenticate(user=operator)

    first = client.post(f"/api/payments/{payment.id}/verify/")
    second = client.post(f"/api/payments/{payment.id}/verify/")

    assert first.status_code == 200
    assert second.status_code == 409
    payment.booking.refresh_from_db()
    assert payment.booking.paid_amount == Decimal("300.00")


def test_operator_lists_payments_by_status(client, operator, payment):
    client.force_authenticate(user=operator)

    pending = client.get("/api/payments/", {"status": Payment.NOT_PAID})
    paid = client.get("/api/payments/", {"status": Payment.PAID})
    invalid = client.get("/api/payments/", {"status": "refunded"})

    assert [item["id"] for item in pending.json()] == [payment.id]
    assert paid.json() == []
    assert invalid.status_code == 400


def test_player_cannot_list_payments(client, player, payment):
    client.force_authenticate(user=player)

    response = client.get("/api/payments/")

    assert response.status_code == 403


def test_delete_is_not_supported(client, operator, payment):
    client.force_authenticate(user=operator)

    response = client.delete(f"/api/payments/{payment.id}/")

    assert response.status_code == 405
    assert Payment.objects.filter(pk=payment.id).exists()


def test_upload_rejects_non_image(settings, tmp_path, client, player, payment):
    settings.MEDIA_ROOT = tmp_path
    client.force_authenticate(user=player)

    response = client.post(
        f"/api/payments/{payment.id}/image/",
        {"image": SimpleUploadedFile("notes.txt", b"not an image", content_type="text/plain")},
        format="multipart",
    )

    assert response.status_code == 400
    payment.refresh_from_db()
    assert payment.payment_status == Payment.NOT_PAID


def test_upload_rejects_corrupt_png(settings, tmp_path, client, player, payment):
    settings.MEDIA_ROOT = tmp_path
    client.force_authenticate(user=player)

    response = client.post(
        f"/api/payments/{payment.id}/image/",
        {"image": SimpleUploadedFile("receipt.png", b"garbage bytes", content_type="image/png")},
        format="multipart",
    )

    assert response.status_code == 400


def test_upload_rejects_oversized_image(settings, tmp_path, client, player, payment):
    settings.MEDIA_ROOT = tmp_path
    settings.PAYMENT_IMAGE_MAX_BYTES = 10
    client.force_authenticate(user=player)

    response = client.post(
        f"/api/payments/{payment.id}/image/",
        {"image": _proof_file()},
        format="multipart",
    )

    assert response.status_code == 400


def test_upload_by_stranger_returns_403(settings, tmp_path, client, stranger, payment):
    settings.MEDIA_ROOT = tmp_path
    client.force_authenticate(user=stranger)

    response = client.post(
        f"/api/payments/{payment.id}/image/",
        {"image": _proof_file()},
        format="multipart",
    )

    assert response.status_code == 403
    assert list(tmp_path.iterdir()) == []


class SigningUnavailableStorage(FileSystemStorage):
    def url(self, name):
        raise RuntimeError("signing failed")


def test_storage_failure_renders_internal_error(monkeypatch, tmp_path, client, player, payment):
    payment.payment_image_link = "payment-proofs/receipt.png"
    payment.save()
    monkeypatch.setattr(
        payments_api,
        "build_payment_manager",
        lambda: PaymentRecordManager(
            booking_reader=DjangoBookingReader(),
            upload_store=StorageUploadStore(storage=SigningUnavailableStorage(location=tmp_path)),
        ),
    )
    client.force_authenticate(user=player)

    response = client.get(f"/api/payments/{payment.id}/")

    assert response.status_code == 500
    body = response.json()
    assert body["code"] == "internal_error"
    assert body["detail"] == "Failed to resolve file URL"
    assert "signing failed" not in response.content.decode()
