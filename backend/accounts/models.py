from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    PLAYER = "PLAYER"
    OPERATOR = "OPERATOR"
    ROLES = [
        (PLAYER, "Player"),
        (OPERATOR, "Operator"),
    ]

    display_name = models.CharField(max_length=120, blank=True)
    phone = models.CharField(max_length=30, blank=True)
    role = models.CharField(max_length=20, choices=ROLES, default=PLAYER)

    @property
    def is_operator(self) -> bool:
        """Operators review payment proofs and manage courts."""
        return self.is_superuser or self.role == self.OPERATOR
