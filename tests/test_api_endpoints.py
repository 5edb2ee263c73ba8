import json
import re
from unittest.mock import AsyncMock, patch

from booking_app.core.exceptions import PersistenceError


def book(client, name, at, date="2024-01-01"):
    return client.post("/api/bookings", json={
        "name": name,
        "address": "Main St 1",
        "booking_date": date,
        "booking_time": at,
    })


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_create_and_list_bookings(client):
    response = book(client, "A", "09:00")
    assert response.status_code == 201
    created = response.json()
    assert created["name"] == "A"
    assert created["completed"] is False

    response = client.get("/api/bookings")
    assert response.status_code == 200
    assert [b["id"] for b in response.json()] == [created["id"]]


def test_conflicting_booking_returns_409(client):
    book(client, "A", "09:00")
    response = book(client, "B", "09:30")
    assert response.status_code == 409
    data = response.json()
    assert data["message"] == "Time already booked"
    assert [c["name"] for c in data["conflicts"]] == ["A"]
    assert len(client.get("/api/bookings").json()) == 1


def test_check_availability(client):
    book(client, "A", "09:00")
    response = client.post("/api/bookings/check_availability", json={"booking_date": "2024-01-01", "booking_time": "09:20"})
    assert response.status_code == 200
    assert response.json()["available"] is False

    response = client.post("/api/bookings/check_availability", json={"booking_date": "2024-01-01", "booking_time": "09:45"})
    assert response.json() == {"available": True, "conflicts": []}


def test_positional_toggle_and_delete(client):
    book(client, "A", "09:00")
    book(client, "C", "10:00")

    assert client.post("/api/bookings/at/1/toggle").json() == {"applied": True}
    assert [b["completed"] for b in client.get("/api/bookings").json()] == [False, True]

    assert client.delete("/api/bookings/at/0").json() == {"applied": True}
    # Stale index from an old page
    response = client.delete("/api/bookings/at/1")
    assert response.status_code == 200
    assert response.json() == {"applied": False}
    assert [b["name"] for b in client.get("/api/bookings").json()] == ["C"]


def test_id_toggle_and_delete(client):
    booking_id = book(client, "A", "09:00").json()["id"]

    assert client.post(f"/api/bookings/{booking_id}/toggle").status_code == 200
    assert client.get("/api/bookings").json()[0]["completed"] is True

    assert client.delete(f"/api/bookings/{booking_id}").status_code == 200
    assert client.delete(f"/api/bookings/{booking_id}").status_code == 404
    assert client.post("/api/bookings/unknown/toggle").status_code == 404


def test_storage_failure_returns_503(client, service):
    with patch.object(service.store, "save", new_callable=AsyncMock) as mock_save:
        mock_save.side_effect = PersistenceError("disk full")
        response = book(client, "A", "09:00")
    assert response.status_code == 503
    assert client.get("/api/bookings").json() == []


def test_form_page(client):
    response = client.get("/")
    assert response.status_code == 200
    assert 'action="/submit"' in response.text


def test_form_submit_flow(client):
    form = {"name": "A", "address": "Main St 1", "booking_date": "2024-01-01", "booking_time": "09:00"}
    response = client.post("/submit", data=form)
    assert response.status_code == 200
    assert "Submission Successful!" in response.text

    response = client.post("/submit", data={**form, "name": "B", "booking_time": "09:30"})
    assert response.status_code == 409
    assert "Time already booked!" in response.text

    response = client.get("/submissions")
    assert response.status_code == 200
    assert "<td>A</td>" in response.text
    assert "<td>B</td>" not in response.text


def test_form_submit_storage_failure(client, service):
    form = {"name": "A", "address": "Main St 1", "booking_date": "2024-01-01", "booking_time": "09:00"}
    with patch.object(service.store, "save", new_callable=AsyncMock) as mock_save:
        mock_save.side_effect = PersistenceError("disk full")
        response = client.post("/submit", data=form)
    assert response.status_code == 503
    assert "Submission Successful" not in response.text


def test_submissions_page_escapes_user_text(client):
    client.post("/submit", data={"name": "<script>x</script>", "address": "A&B", "booking_date": "2024-01-01", "booking_time": "09:00"})
    response = client.get("/submissions")
    assert "<script>x</script>" not in response.text
    assert "&lt;script&gt;" in response.text


def test_submissions_toggle_and_delete_redirect(client):
    booking_id = book(client, "A", "09:00").json()["id"]

    response = client.post(f"/submissions/{booking_id}/toggle", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/submissions"
    assert client.get("/api/bookings").json()[0]["completed"] is True

    response = client.post(f"/submissions/{booking_id}/delete")
    assert response.status_code == 200
    assert client.get("/api/bookings").json() == []


def test_submissions_buttons_work_for_records_without_id(client, bookings_file):
    bookings_file.write_text(json.dumps([
        {"name": "A", "address": "X", "booked_on": "2024-01-01", "booking_date": "2024-02-01", "booking_time": "10:00"},
        {"name": "B", "address": "Y", "booked_on": "2024-01-01", "booking_date": "2024-02-01", "booking_time": "12:00"},
    ]))

    page = client.get("/submissions").text
    ids = re.findall(r'action="/submissions/([0-9a-f]+)/toggle"', page)
    assert len(ids) == 2

    response = client.post(f"/submissions/{ids[0]}/toggle", follow_redirects=False)
    assert response.status_code == 303
    assert [b["completed"] for b in client.get("/api/bookings").json()] == [True, False]

    client.post(f"/submissions/{ids[1]}/delete")
    assert [b["name"] for b in client.get("/api/bookings").json()] == ["A"]
