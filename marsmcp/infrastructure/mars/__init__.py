"""Adapters for the USDA AMS Market News (MARS) HTTP API."""
