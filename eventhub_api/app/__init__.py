"""
Application package initializer.

This package contains the main entrypoint for the API and all of its
submodules.  Each domain (events, users) exposes a router defined in
``api/v1/endpoints``; business rules live in ``services`` and the
SQLite-backed entity store in ``core.db``.
"""

from .main import app  # noqa: F401
