import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if SRC.exists():
    sys.path.insert(0, str(SRC))


class FakeClock:
    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int = 1000) -> int:
        self.now += ms
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def kv_store(tmp_path):
    from scribe.storage import JsonKeyValueStore

    return JsonKeyValueStore(tmp_path)


@pytest.fixture
def store(kv_store, clock):
    from scribe.storage import NotesStorage
    from scribe.store import NoteStore

    return NoteStore(NotesStorage(kv_store), clock=clock)
