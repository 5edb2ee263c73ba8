from html import escape
from typing import List

from fastapi import APIRouter, Depends, Form
from fastapi.responses import HTMLResponse, RedirectResponse

from booking_app.core.exceptions import BookingConflictError, PersistenceError
from booking_app.core.logger import logger
from booking_app.models.booking import Booking, BookingRequest
from booking_app.services.booking_service import BookingService, get_booking_service

router = APIRouter()

STYLE = """
<style>
    body { font-family: Arial, sans-serif; background-color: #f4f4f9; padding: 2rem; text-align: center; }
    .card { background-color: white; border: 2px solid #007bff; padding: 2rem; max-width: 500px;
            margin: 0 auto; border-radius: 8px; box-shadow: 0 4px 6px rgba(0,0,0,0.1); }
    table { margin: 0 auto; border-collapse: collapse; background-color: white; }
    td, th { border: 1px solid #ccc; padding: 6px 12px; }
    a { color: #007bff; font-weight: bold; }
</style>
"""

FORM_PAGE = f"""<!DOCTYPE html>
<html lang="en">
<head><meta charset="UTF-8"><title>Book a visit</title>{STYLE}</head>
<body>
    <div class="card">
        <h1>Book a visit</h1>
        <form action="/submit" method="post">
            <p><label>Name <input type="text" name="name" required></label></p>
            <p><label>Address <input type="text" name="address" required></label></p>
            <p><label>Date <input type="date" name="booking_date" required></label></p>
            <p><label>Time <input type="time" name="booking_time" required></label></p>
            <p><button type="submit">Book</button></p>
        </form>
        <a href="/submissions">View bookings</a>
    </div>
</body>
</html>
"""


def _page(title: str, body: str) -> str:
    return (
        f'<!DOCTYPE html><html lang="en"><head><meta charset="UTF-8">'
        f"<title>{escape(title)}</title>{STYLE}</head><body>{body}</body></html>"
    )


def _bookings_table(bookings: List[Booking]) -> str:
    rows = []
    for b in bookings:
        status = "Done" if b.completed else "Open"
        rows.append(
            "<tr>"
            f"<td>{escape(b.name)}</td><td>{escape(b.address)}</td><td>{escape(b.booked_on)}</td>"
            f"<td>{escape(b.booking_date)}</td><td>{escape(b.booking_time)}</td><td>{status}</td>"
            f'<td><form action="/submissions/{escape(b.id)}/toggle" method="post"><button>Toggle</button></form></td>'
            f'<td><form action="/submissions/{escape(b.id)}/delete" method="post"><button>Delete</button></form></td>'
            "</tr>"
        )
    return (
        "<table><tr><th>Name</th><th>Address</th><th>Booked On</th><th>Date</th>"
        "<th>Time</th><th>Status</th><th></th><th></th></tr>"
        + "".join(rows)
        + "</table>"
    )


@router.get("/", response_class=HTMLResponse)
async def index():
    return FORM_PAGE


@router.get("/submissions", response_class=HTMLResponse)
async def show_submissions(service: BookingService = Depends(get_booking_service)):
    bookings = await service.list_bookings()
    return _page("Bookings", f"<h1>Bookings</h1>{_bookings_table(bookings)}<p><a href='/'>Go back</a></p>")


@router.post("/submit", response_class=HTMLResponse)
async def submit(
    name: str = Form(...),
    address: str = Form(...),
    booking_date: str = Form(""),
    booking_time: str = Form(""),
    service: BookingService = Depends(get_booking_service),
):
    request = BookingRequest(name=name, address=address, booking_date=booking_date, booking_time=booking_time)
    try:
        booking = await service.submit(request)
    except BookingConflictError:
        return HTMLResponse(
            _page("Time already booked", "<h1>Time already booked!</h1><a href='/'>Go back</a>"),
            status_code=409,
        )
    except PersistenceError as e:
        logger.error(f"❌ Booking for {name} not saved: {e}")
        return HTMLResponse(
            _page(
                "Booking failed",
                "<h1>Booking could not be saved</h1><p>Please try again later.</p><a href='/'>Go back</a>",
            ),
            status_code=503,
        )

    return _page(
        "Submission Successful",
        f"""<div class="card">
            <h1>Submission Successful!</h1>
            <p><strong>Name:</strong> {escape(booking.name)}</p>
            <p><strong>Address:</strong> {escape(booking.address)}</p>
            <p><strong>Date:</strong> {escape(booking.booking_date)}</p>
            <p><strong>Time:</strong> {escape(booking.booking_time)}</p>
            <a href="/">Go back</a>
        </div>""",
    )


@router.post("/submissions/{booking_id}/toggle")
async def toggle_submission(booking_id: str, service: BookingService = Depends(get_booking_service)):
    await service.toggle_completed(booking_id)
    return RedirectResponse("/submissions", status_code=303)


@router.post("/submissions/{booking_id}/delete")
async def delete_submission(booking_id: str, service: BookingService = Depends(get_booking_service)):
    await service.delete(booking_id)
    return RedirectResponse("/submissions", status_code=303)
