"""Configuration, exceptions and observability setup."""
