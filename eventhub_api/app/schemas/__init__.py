"""
Pydantic schema definitions for API payloads.

Schemas are separated from the entity store's row dictionaries to
decouple the API representation from persistence.
"""
