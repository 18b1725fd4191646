"""Shared helpers: exceptions, validation and path checks."""
