"""Configuration, logging, persistence and security primitives."""
