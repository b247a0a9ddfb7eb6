"""
Top-level package for the EventHub API.

This file makes ``eventhub_api`` a Python package so that modules
within ``app`` can be imported using fully qualified names like
``eventhub_api.app.main``.  The HTTP client used by integrations lives
in ``eventhub_api.client``.

The package provides no public exports; all functionality lives in
submodules.
"""

__all__ = []
