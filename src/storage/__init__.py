"""
Persistence adapters.

The core only sees the KeyValueStore protocol; production code binds it to
JsonFileStore under the configured data directory, tests to InMemoryStore.
"""

from .auxiliary import MISTAKE_REASONS, ExamModeStore, MistakeStore, SelfMarkStore
from .kv import InMemoryStore, JsonFileStore, KeyValueStore, read_json, write_json

__all__ = [
    "KeyValueStore",
    "InMemoryStore",
    "JsonFileStore",
    "read_json",
    "write_json",
    "ExamModeStore",
    "MistakeStore",
    "SelfMarkStore",
    "MISTAKE_REASONS",
]
