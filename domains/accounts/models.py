# domains/accounts/models.py
from __future__ import annotations

import uuid
from django.db import models
from django.contrib.auth.models import AbstractUser


# ----- Enums -------------------------------------------------
class UserStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    INACTIVE = "inactive", "Inactive"
    DELETED = "deleted", "Deleted"


class UserRole(models.TextChoices):
    USER  = "user", "User"
    ADMIN = "admin", "Admin"


# ----- Models ------------------------------------------------
class User(AbstractUser):
    """
    Marketplace account (buyers and artists share one model).
    - PK: UUID (db_column='user_id')
    - email: unique, used as the login field for JWT
    - role 'admin' gets Django admin access (is_staff=True) automatically
    """
    Role = UserRole

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        db_column="user_id",
    )

    email = models.EmailField(max_length=254, unique=True)
    # display name shown in notifications ("<name> shipped your artwork")
    name = models.CharField(max_length=150, blank=True)

    status = models.CharField(
        max_length=20,
        choices=UserStatus.choices,
        default=UserStatus.ACTIVE,
    )
    role = models.CharField(
        max_length=16,
        choices=UserRole.choices,
        default=UserRole.USER,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "users"
        indexes = [
            models.Index(fields=["status", "role"], name="users_status_a1e4c2_idx"),
        ]

    @property
    def is_admin_role(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def display_name(self) -> str:
        return self.name or self.username or self.email

    def __str__(self) -> str:
        return self.email or self.username

    def save(self, *args, **kwargs):
        # superuser or role == admin → is_staff
        should_staff = self.is_superuser or self.role == UserRole.ADMIN
        if self.is_staff != should_staff:
            self.is_staff = should_staff
        super().save(*args, **kwargs)
