import pytest

from ebay_lister.ai.listing_requests import ImageBlob
from ebay_lister.session.listing_session import ListingSession
from ebay_lister.storage.history_store import HistoryStore

from .helpers import FakeLister

LEVEL_CSV = "L1,L2,L3\nShoes,Running,Trail\n"


class FakeClock:
    def __init__(self, start=1_700_000_000.0):
        self.now = start

    def __call__(self):
        return self.now


@pytest.fixture
def history_store(tmp_path):
    return HistoryStore(str(tmp_path / "history.json"))


@pytest.fixture
def lister():
    return FakeLister()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def images():
    return [
        ImageBlob(data=b"\x89PNG front", mime_type="image/png", filename="front.png"),
        ImageBlob(data=b"\xff\xd8 back", mime_type="image/jpeg", filename="back.jpg"),
    ]


@pytest.fixture
def session(lister, history_store, clock):
    return ListingSession(lister=lister, history_store=history_store, clock=clock)


@pytest.fixture
def ready_session(session, images):
    """Session with photos and a category file loaded"""
    session.set_images(images)
    session.load_category_files([("categories.csv", LEVEL_CSV)])
    return session
