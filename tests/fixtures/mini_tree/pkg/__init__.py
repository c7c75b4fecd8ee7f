"""Fixture package with one annotated module."""
