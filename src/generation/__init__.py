"""Running generations end to end."""

from generation.runner import GenerationRunner, PersistenceSink, Transport

__all__ = ["GenerationRunner", "PersistenceSink", "Transport"]
