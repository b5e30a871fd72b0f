"""Shared enums for models and auth."""
import enum

class AdminRole(enum.Enum):
    admin = "admin"
    super = "super"
