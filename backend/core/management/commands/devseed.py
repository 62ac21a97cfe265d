from datetime import datetime, timedelta
from decimal import Decimal

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone

from accounts.models import User
from courts.models import Court, Slot


SEED_PASSWORD = "Courtside123!"
SUPERUSER_EMAIL = "admin@courtside.test"
SUPERUSER_PASSWORD = "AdminCourtside123!"


class Command(BaseCommand):
    help = "Populate the local development database with sample data."

    def handle(self, *args, **options):
        if not settings.DEBUG:
            raise CommandError("Refusing to seed data while DEBUG is False.")

        with transaction.atomic():
            self.stdout.write(self.style.MIGRATE_HEADING("Creating users"))
            self._ensure_user(
                email="operator@courtside.test",
                first_name="Olivia",
                last_name="Operator",
                display_name="Olivia Operator",
                role=User.OPERATOR,
            )
            self._ensure_user(
                email="player@example.test",
                first_name="Pat",
                last_name="Player",
                display_name="Pat Player",
                role=User.PLAYER,
            )

            self.stdout.write(self.style.MIGRATE_HEADING("Ensuring admin superuser"))
            self._ensure_superuser()

            self.stdout.write(self.style.MIGRATE_HEADING("Creating courts & slots"))
            center = self._ensure_court(
                name="Center Court",
                location="North Wing",
                min_down_payment=30,
            )
            practice = self._ensure_court(
                name="Practice Court",
                location="South Wing",
                min_down_payment=0,
            )

            tz = timezone.get_current_timezone()
            tomorrow = timezone.localdate() + timedelta(days=1)
            for court, price in ((center, Decimal("1000.00")), (practice, Decimal("400.00"))):
                for hour in (8, 10, 18, 20):
                    start = timezone.make_aware(
                        datetime(tomorrow.year, tomorrow.month, tomorrow.day, hour, 0), tz
                    )
                    _, created = Slot.objects.get_or_create(
                        court=court,
                        start=start,
                        end=start + timedelta(hours=2),
                        defaults={"price": price},
                    )
                    if created:
                        self.stdout.write(
                            self.style.NOTICE(f"Added {court.name} slot at {start:%Y-%m-%d %H:%M}")
                        )

        self.stdout.write(self.style.SUCCESS("Seed data ready."))
        self.stdout.write(f"Sample user password: {SEED_PASSWORD}")

    def _ensure_court(self, *, name: str, location: str, min_down_payment: int) -> Court:
        court, _ = Court.objects.update_or_create(
            name=name,
            defaults={
                "location": location,
                "description": f"Sample listing for {name}.",
                "min_down_payment": min_down_payment,
                "is_active": True,
            },
        )
        return court

    def _ensure_user(
        self,
        email: str,
        first_name: str,
        last_name: str,
        display_name: str,
        role: str,
    ) -> User:
        user, created = User.objects.get_or_create(
            email=email,
            defaults={
                "username": email,
                "first_name": first_name,
                "last_name": last_name,
                "display_name": display_name,
                "role": role,
            },
        )
        if created:
            user.set_password(SEED_PASSWORD)
            user.save()
        elif user.role != role:
            user.role = role
            user.save(update_fields=["role"])
        return user

    def _ensure_superuser(self) -> User:
        user, created = User.objects.get_or_create(
            email=SUPERUSER_EMAIL,
            defaults={
                "username": SUPERUSER_EMAIL,
                "first_name": "Admin",
                "last_name": "User",
                "display_name": "Admin User",
                "role": User.OPERATOR,
                "is_staff": True,
                "is_superuser": True,
            },
        )
        flag_updates = {}
        if not user.is_staff:
            flag_updates["is_staff"] = True
        if not user.is_superuser:
            flag_updates["is_superuser"] = True
        if flag_updates:
            for attr, value in flag_updates.items():
                setattr(user, attr, value)
            user.save(update_fields=list(flag_updates.keys()))
        if created or not user.has_usable_password():
            user.set_password(SUPERUSER_PASSWORD)
            user.save(update_fields=["password"])
        return user
