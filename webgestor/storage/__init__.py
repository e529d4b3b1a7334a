"""
Storage adapters: key -> JSON array persistence.
"""
from webgestor.storage.base import StorageAdapter  # noqa: F401
from webgestor.storage.json_file import JSONFileStorage  # noqa: F401
from webgestor.storage.memory import MemoryStorage  # noqa: F401
