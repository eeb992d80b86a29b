"""Voidloot HTTP API."""
