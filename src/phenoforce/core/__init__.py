"""Core types, configuration, calendar and state containers."""
