"""Integrations with external services used by the app registry."""
