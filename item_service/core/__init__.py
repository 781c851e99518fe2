"""Core domain layer: settings, models, events and exceptions."""
