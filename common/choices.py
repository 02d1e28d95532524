"""Shared enumerations and choices used across apps."""

from django.db import models


class DraftPublished(models.TextChoices):
    DRAFT = "draft", "Draft"
    PUBLISHED = "published", "Published"


class UserRole(models.TextChoices):
    """Roles recognised by order and coupon permissions."""

    USER = "user", "User"
    MANAGER = "manager", "Manager"
    ADMIN = "admin", "Admin"


class PaymentMethod(models.TextChoices):
    """How an order is settled."""

    CASH = "cash", "Cash"
    CARD = "card", "Card"


class MovementReason(models.TextChoices):
    ORDER = "order", "Order placed"
    PAYMENT = "payment", "Card payment confirmed"
    MANUAL = "manual", "Manual adjustment"
