"""Infrastructure adapters: database, cache, messaging, logging, metrics."""
