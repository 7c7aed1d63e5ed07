"""Enums for model fields."""

from enum import Enum


class UserRole(str, Enum):
    """Coarse-grained permission tag on a user account."""

    CLIENT = "client"
    PROVIDER = "provider"
    PARTNER = "partner"
    ADMIN = "admin"


class ServiceStatus(str, Enum):
    """Lifecycle states of a wash service booking.

    Transitions between states are unconstrained.
    """

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
