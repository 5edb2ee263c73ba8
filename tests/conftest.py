import pytest
from fastapi.testclient import TestClient

from booking_app.main import app
from booking_app.services.booking_service import BookingService, get_booking_service
from booking_app.services.store_service import BookingStore


@pytest.fixture
def bookings_file(tmp_path):
    return tmp_path / "submissions.json"


@pytest.fixture
def store(bookings_file):
    return BookingStore(bookings_file)


@pytest.fixture
def service(store):
    return BookingService(store=store, min_separation=45)


@pytest.fixture
def client(service):
    app.dependency_overrides[get_booking_service] = lambda: service
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
