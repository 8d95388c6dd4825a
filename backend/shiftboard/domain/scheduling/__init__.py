"""Scheduling bounded context."""
