"""
Schemas module - Request/Response schemas for API endpoints.

Difference from models:
- Models: role metadata used internally
- Schemas: API contract (what client sends/receives)
"""
