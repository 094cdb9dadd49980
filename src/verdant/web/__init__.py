"""Verdant Web API."""
