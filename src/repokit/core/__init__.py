"""Core configuration, constants and exceptions."""
