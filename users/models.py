"""User model used as the caller identity for carts and orders.

Extends Django's `AbstractUser` with a unique email, a contact phone, and a
`role` that gates order administration (user, manager, admin).
"""

from common.choices import UserRole
from django.contrib.auth.models import AbstractUser
from django.core.validators import RegexValidator
from django.db import models


class User(AbstractUser):
    """Custom user with unique email and an application role.

    Fields:
    - email: the primary email, unique at the database level (normalized).
    - phone: optional contact number in E.164 format.
    - role: `user` for shoppers, `manager` and `admin` for staff.
    """

    ROLE_USER = UserRole.USER
    ROLE_MANAGER = UserRole.MANAGER
    ROLE_ADMIN = UserRole.ADMIN

    email = models.EmailField(unique=True)
    phone = models.CharField(
        max_length=16,
        blank=True,
        validators=[RegexValidator(r"^\+?[1-9]\d{1,14}$", message="Use E.164 format (e.g., +14155552671)")],
        help_text="Primary contact number for the account in E.164 format",
    )
    role = models.CharField(max_length=16, choices=UserRole.choices, default=UserRole.USER, db_index=True)

    def save(self, *args, **kwargs):
        """Normalize email and phone before persisting.

        Emails are stored lowercase without surrounding whitespace so
        uniqueness checks and payer lookups are reliable.
        """
        if self.email:
            self.email = self.email.strip().lower()
        if self.phone:
            self.phone = self.phone.strip()
        super().save(*args, **kwargs)

    @property
    def is_admin_role(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_staff_role(self) -> bool:
        return self.role in (UserRole.ADMIN, UserRole.MANAGER)

    @property
    def display_name(self) -> str:
        return self.get_full_name() or self.username
