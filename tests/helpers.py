"""Test helpers: a sample catalog body and an in-memory catalog source."""

import json
import threading


SAMPLE_RECORDS = [
    {"name": "Sunrise", "url": "http://media.test/sunrise.mp3", "size": 1,
     "genre": "Ambient", "artist": "Aurora", "album": "Dawn"},
    {"name": "Sunset Blvd", "url": "http://media.test/sunset.mp3", "size": 2,
     "genre": "Jazz", "artist": "Dusk Trio", "album": "Evening"},
    {"name": "Moonlight", "url": "http://media.test/moonlight.mp3", "size": 3},
]


def catalog_body(records=None) -> bytes:
    return json.dumps({"files": SAMPLE_RECORDS if records is None else records}).encode("utf-8")


class FakeSource:
    """Catalog source that serves canned bodies (or raises) and counts calls.

    The n-th call gets the n-th body; the last body repeats.  With a ``gate``
    every call blocks until the event is set.
    """

    def __init__(self, *bodies, gate: threading.Event = None):
        self.bodies = list(bodies) or [catalog_body()]
        self.gate = gate
        self.calls = 0
        self._lock = threading.Lock()

    def fetch_bytes(self) -> bytes:
        with self._lock:
            self.calls += 1
            n = self.calls
        if self.gate is not None and not self.gate.wait(timeout=5):
            raise RuntimeError("gate never opened")
        body = self.bodies[min(n, len(self.bodies)) - 1]
        if isinstance(body, Exception):
            raise body
        return body
