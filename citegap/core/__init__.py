"""Core types, configuration and utilities."""
