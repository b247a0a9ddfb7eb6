"""
Version 1 of the API.

Mounted under ``/api`` by ``main.create_app``; breaking changes should
go into a new version subpackage.
"""
