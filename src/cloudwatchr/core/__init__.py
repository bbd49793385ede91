"""Core domain: models, validation, ports and the intake service."""
