from crm_dedupe.stores.memory import InMemoryRecordStore
from crm_dedupe.stores.snapshot import load_store, save_store

__all__ = ["InMemoryRecordStore", "load_store", "save_store"]
