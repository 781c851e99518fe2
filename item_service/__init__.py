"""Item CRUD microservice with a transactional outbox and cached reads."""

__version__ = "0.1.0"
