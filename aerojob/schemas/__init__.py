"""
Schemas module - Request/Response schemas for API endpoints.

Difference from models:
- Models: Stored document shapes and normalization rules
- Schemas: API contract (what client sends/receives)
"""
