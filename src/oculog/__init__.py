"""Oculog client: session, log synchronization and weather for the Oculog API."""

__version__ = "0.1.0"
