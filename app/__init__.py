"""
Placement Management System
Role-based account backend for the placement dashboards.

Architecture:
- MongoDB: one account collection per role (student, faculty, TPO, admin)
- Shared activity log for signup / login / profile updates
- FastAPI routes generated per role from a single auth service
"""

__version__ = "1.0.0"
