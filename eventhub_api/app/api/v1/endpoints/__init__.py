"""
Endpoint subpackage for API v1.

Each module defines an APIRouter for one domain (events, users); the
routers are aggregated in ``router.py``.
"""
