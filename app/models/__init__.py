"""
Models module - role metadata shared by the store, services and routes.
"""
from app.models.roles import ROLES, RoleSpec

__all__ = ["ROLES", "RoleSpec"]
