# Folio ports (Protocol interfaces)
# Abstract interfaces for adapters; no implementations here

from src.core.ports.kv import KeyType, KVStorePort, StoreError
from src.core.ports.time import TimePort

__all__ = [
    "KeyType",
    "KVStorePort",
    "StoreError",
    "TimePort",
]
