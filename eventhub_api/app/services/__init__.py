"""
Service layer abstraction.

Each service encapsulates business logic for a domain and receives the
``EntityStore`` (and the settings it needs) at construction, so API
handlers stay thin and tests can run services against a temporary
database.
"""
