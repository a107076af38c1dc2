import unittest
from datetime import timedelta
from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

import api
import booking_service
import calendar_events
from app import app
from repository import BookingRepository
from support import ADMIN_HEADERS, booking_payload, count_bookings, future, insert_booking, reset_db, stub_notifier


class BookingApiTestCase(unittest.TestCase):
    def setUp(self):
        reset_db()
        self.notifier = stub_notifier()
        app.dependency_overrides[api.get_notifier] = lambda: self.notifier
        self.client = TestClient(app, raise_server_exceptions=False)

    def tearDown(self):
        app.dependency_overrides.clear()


class TestCreateBooking(BookingApiTestCase):
    def test_three_day_booking_without_extras(self):
        r = self.client.post("/api/booking", json=booking_payload())
        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertTrue(body["ok"])
        self.assertEqual(body["status"], "PENDING")
        self.assertTrue(body["bookingId"])
        self.assertTrue(body["whatsappLink"].startswith("https://wa.me/"))
        summary = body["summary"]
        self.assertEqual(summary["dates"]["days"], 3)
        self.assertEqual(summary["estimatedTotal"], 145 * 3)
        self.assertEqual(summary["extrasTotal"], 0)
        self.assertEqual(summary["totalEstimateFinal"], 145 * 3)
        self.assertEqual(summary["deposit"], 600)
        self.assertEqual(count_bookings(), 1)

    def test_extras_are_normalized_and_added(self):
        payload = booking_payload(extras=["second_driver_south", "child_seat", "second_driver_north"])
        body = self.client.post("/api/booking", json=payload).json()
        summary = body["summary"]
        self.assertEqual([e["id"] for e in summary["extras"]], ["child_seat", "second_driver_north"])
        self.assertEqual(summary["extrasTotal"], 80)
        self.assertEqual(summary["totalEstimateFinal"], 145 * 3 + 80)

    def test_all_notifications_are_attempted(self):
        self.client.post("/api/booking", json=booking_payload())
        self.notifier.send_client_email.assert_called_once()
        self.notifier.send_admin_email.assert_called_once()
        self.notifier.send_whatsapp_admin.assert_called_once()
        self.notifier.create_calendar_event.assert_called_once()

    def test_overlapping_booking_is_a_conflict(self):
        start = future(30)
        insert_booking("audi-a5-cabrio-2022", start, start + timedelta(days=3))
        r = self.client.post(
            "/api/booking",
            json=booking_payload(start=start + timedelta(days=1), end=start + timedelta(days=5)),
        )
        self.assertEqual(r.status_code, 409)
        self.assertEqual(r.json(), {"ok": False, "error": "Car is not available for the selected dates"})
        self.assertEqual(count_bookings(), 1)

    def test_cancelled_booking_frees_the_slot(self):
        start = future(30)
        insert_booking("audi-a5-cabrio-2022", start, start + timedelta(days=3), status="CANCELLED")
        r = self.client.post("/api/booking", json=booking_payload(start=start))
        self.assertEqual(r.status_code, 200)

    def test_end_before_start_is_rejected_before_availability(self):
        start = future(30)
        with patch.object(booking_service, "is_car_available") as available:
            r = self.client.post("/api/booking", json=booking_payload(start=start, end=start))
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["error"], "Return date must be after pickup date")
        available.assert_not_called()
        self.assertEqual(count_bookings(), 0)

    def test_pickup_in_the_past(self):
        start = future(-2)
        r = self.client.post("/api/booking", json=booking_payload(start=start))
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["error"], "Pickup date cannot be in the past")

    def test_missing_fields(self):
        payload = booking_payload()
        del payload["phone"]
        r = self.client.post("/api/booking", json=payload)
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["error"], "Missing required fields")

    def test_terms_must_be_accepted(self):
        r = self.client.post("/api/booking", json=booking_payload(acceptTerms=False))
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["error"], "You must accept the rental terms")

    def test_invalid_date(self):
        payload = booking_payload()
        payload["startAt"] = "tomorrow"
        r = self.client.post("/api/booking", json=payload)
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["error"], "Invalid date format")

    def test_unknown_extra(self):
        r = self.client.post("/api/booking", json=booking_payload(extras=["jetpack"]))
        self.assertEqual(r.status_code, 400)
        self.assertIn("jetpack", r.json()["error"])

    def test_unknown_car(self):
        r = self.client.post("/api/booking", json=booking_payload(car_slug="delorean-1985"))
        self.assertEqual(r.status_code, 404)
        self.assertEqual(r.json(), {"ok": False, "error": "Car not found"})

    def test_malformed_body(self):
        r = self.client.post("/api/booking", json={"extras": "child_seat"})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json(), {"ok": False, "error": "Invalid request"})

    def test_failing_calendar_does_not_fail_the_booking(self):
        self.notifier = stub_notifier(create_calendar_event=MagicMock(side_effect=RuntimeError("calendar down")))
        r = self.client.post("/api/booking", json=booking_payload())
        self.assertEqual(r.status_code, 200)
        self.assertTrue(r.json()["ok"])
        self.assertTrue(r.json()["bookingId"])
        self.assertNotIn("calendar", r.json())

    def test_failing_calendar_write_back_keeps_the_booking(self):
        created = calendar_events.CalendarEventResult(
            status=calendar_events.CREATED, event_id="evt-2", html_link="https://calendar.example/evt-2"
        )
        self.notifier = stub_notifier(create_calendar_event=MagicMock(return_value=created))
        db_error = OperationalError("UPDATE booking", {}, Exception("database is locked"))
        with patch.object(BookingRepository, "attach_calendar_event", side_effect=db_error):
            r = self.client.post("/api/booking", json=booking_payload())
        self.assertEqual(r.status_code, 200)
        self.assertTrue(r.json()["ok"])
        self.assertEqual(r.json()["status"], "PENDING")
        self.assertEqual(count_bookings(), 1)

    def test_null_extras_mean_no_extras(self):
        r = self.client.post("/api/booking", json=booking_payload(extras=None))
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["summary"]["extras"], [])
        self.assertEqual(r.json()["summary"]["extrasTotal"], 0)

    def test_created_calendar_event_is_stored(self):
        created = calendar_events.CalendarEventResult(
            status=calendar_events.CREATED, event_id="evt-1", html_link="https://calendar.example/evt-1"
        )
        self.notifier = stub_notifier(create_calendar_event=MagicMock(return_value=created))
        body = self.client.post("/api/booking", json=booking_payload()).json()
        self.assertEqual(body["calendar"], {"eventId": "evt-1", "htmlLink": "https://calendar.example/evt-1"})

        listed = self.client.get("/api/bookings", headers=ADMIN_HEADERS).json()["bookings"]
        self.assertEqual(listed[0]["calendarEventId"], "evt-1")


class TestSearchApi(BookingApiTestCase):
    def test_confirmed_suv_is_listed_as_unavailable(self):
        start = future(60)
        end = start + timedelta(days=4)
        insert_booking("jeep-wrangler-sahara-4xe-2022-sky-top", start, end, status="CONFIRMED")
        r = self.client.get("/api/search", params={
            "from": (start + timedelta(days=1)).isoformat(),
            "to": (end + timedelta(days=2)).isoformat(),
            "cat": "suv",
        })
        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertEqual(body["cat"], "suv")
        self.assertEqual(body["unavailableSlugs"], ["jeep-wrangler-sahara-4xe-2022-sky-top"])
        self.assertNotIn("jeep-wrangler-sahara-4xe-2022-sky-top", [c["slug"] for c in body["cars"]])

    def test_missing_parameters(self):
        r = self.client.get("/api/search", params={"from": future(3).isoformat()})
        self.assertEqual(r.status_code, 400)
        self.assertFalse(r.json()["ok"])


class TestCatalogApi(BookingApiTestCase):
    def test_cars_are_sorted_by_from_price(self):
        cars = self.client.get("/api/cars", params={"cat": "cabrio"}).json()["cars"]
        prices = [c["fromDailyPrice"] for c in cars]
        self.assertEqual(prices, sorted(prices))
        self.assertTrue(all(c["category"] == "cabrio" for c in cars))

    def test_car_detail(self):
        r = self.client.get("/api/cars/mercedes-benz-e450-mhev-cabrio-2022")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["car"]["pricing"]["d8_14"], 120)
        self.assertEqual(self.client.get("/api/cars/delorean-1985").status_code, 404)

    def test_quote(self):
        start = future(10)
        r = self.client.get("/api/cars/audi-a5-cabrio-2022/quote", params={
            "from": start.isoformat(),
            "to": (start + timedelta(days=8)).isoformat(),
            "extras": ["second_driver_south"],
        })
        body = r.json()
        self.assertEqual(body["pricing"]["dailyRate"], 95)
        self.assertEqual(body["pricing"]["total"], 95 * 8)
        self.assertEqual(body["totalEstimateFinal"], 95 * 8 + 30)

    def test_extras_listing(self):
        ids = [e["id"] for e in self.client.get("/api/extras").json()["extras"]]
        self.assertEqual(ids, ["child_seat", "second_driver_south", "second_driver_north", "island_delivery"])

    def test_health(self):
        self.assertEqual(self.client.get("/health").json(), {"ok": True})


class TestAdminBookings(BookingApiTestCase):
    def test_listing_requires_password(self):
        r = self.client.get("/api/bookings")
        self.assertEqual(r.status_code, 401)
        self.assertEqual(r.json(), {"ok": False, "error": "Unauthorized"})
        r = self.client.get("/api/bookings", headers={"x-admin-password": "wrong"})
        self.assertEqual(r.status_code, 401)

    def test_empty_password_never_authorizes(self):
        with patch("config.ADMIN_PASSWORD", ""):
            r = self.client.get("/api/bookings", headers={"x-admin-password": ""})
        self.assertEqual(r.status_code, 401)

    def test_confirm_then_cancel(self):
        booking_id = self.client.post("/api/booking", json=booking_payload()).json()["bookingId"]

        r = self.client.post(f"/api/admin/bookings/{booking_id}/confirm", headers=ADMIN_HEADERS)
        self.assertEqual(r.json()["booking"]["status"], "CONFIRMED")

        r = self.client.post(f"/api/admin/bookings/{booking_id}/cancel", headers=ADMIN_HEADERS)
        self.assertEqual(r.json()["booking"]["status"], "CANCELLED")

        r = self.client.post(f"/api/admin/bookings/{booking_id}/confirm", headers=ADMIN_HEADERS)
        self.assertEqual(r.status_code, 409)

    def test_unknown_booking(self):
        r = self.client.post("/api/admin/bookings/nope/confirm", headers=ADMIN_HEADERS)
        self.assertEqual(r.status_code, 404)

    def test_confirm_refuses_overlap_with_active_booking(self):
        start = future(30)
        insert_booking("audi-a5-cabrio-2022", start, start + timedelta(days=3), status="CONFIRMED")
        clashing = insert_booking("audi-a5-cabrio-2022", start + timedelta(days=1), start + timedelta(days=4))
        free = insert_booking("audi-a5-cabrio-2022", start + timedelta(days=10), start + timedelta(days=12))

        r = self.client.post(f"/api/admin/bookings/{clashing.id}/confirm", headers=ADMIN_HEADERS)
        self.assertEqual(r.status_code, 409)
        self.assertEqual(r.json()["error"], "Another active booking overlaps this one")
        r = self.client.post(f"/api/admin/bookings/{free.id}/confirm", headers=ADMIN_HEADERS)
        self.assertEqual(r.status_code, 200)

    def test_listing_is_newest_first(self):
        first = self.client.post("/api/booking", json=booking_payload(start=future(20))).json()["bookingId"]
        second = self.client.post("/api/booking", json=booking_payload(start=future(40))).json()["bookingId"]
        listed = self.client.get("/api/bookings", headers=ADMIN_HEADERS).json()["bookings"]
        self.assertEqual([b["id"] for b in listed], [second, first])


if __name__ == "__main__":
    unittest.main()
