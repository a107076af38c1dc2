# ============================================================
# notifier.py — Notifications après création d'une réservation
# ------------------------------------------------------------
# Quatre envois indépendants : email client, email agence,
# WhatsApp agence, événement d'agenda. Ils tournent en parallèle
# dans un pool de threads ; on attend au plus
# NOTIFY_TIMEOUT_SECONDS. Un échec (exception, résultat "ok:false",
# délai dépassé) devient un NotificationResult en erreur :
# journalisé, jamais remonté au client.
# ============================================================
import logging
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import calendar_events
import config
import mailer
import whatsapp
from catalog import Car
from errors import NotificationError
from extras import ExtrasSummary
from models import Booking
from pricing import PriceSummary

logger = logging.getLogger(__name__)


@dataclass
class BookingNotice:
    booking: Booking
    car: Car
    pricing: PriceSummary
    extras: ExtrasSummary
    total_estimate: Optional[int]


@dataclass
class NotificationResult:
    name: str
    ok: bool
    value: Any = None
    error: Optional[str] = None


@dataclass
class NotificationReport:
    results: Dict[str, NotificationResult] = field(default_factory=dict)

    @property
    def failures(self) -> List[NotificationResult]:
        return [r for r in self.results.values() if not r.ok]

    def get(self, name: str) -> Optional[NotificationResult]:
        return self.results.get(name)


class Notifier:
    """Lance les notifications d'une réservation, chacune isolée des autres.

    Les collaborateurs sont injectables (tests) ; par défaut ce sont
    les vrais modules mailer / whatsapp / calendar_events.
    """

    def __init__(
        self,
        send_client_email: Callable = mailer.send_client_email,
        send_admin_email: Callable = mailer.send_admin_email,
        send_whatsapp_admin: Callable = whatsapp.send_whatsapp_admin,
        create_calendar_event: Callable = calendar_events.create_calendar_event,
        timeout: Optional[float] = None,
    ):
        self.send_client_email = send_client_email
        self.send_admin_email = send_admin_email
        self.send_whatsapp_admin = send_whatsapp_admin
        self.create_calendar_event = create_calendar_event
        self.timeout = config.NOTIFY_TIMEOUT_SECONDS if timeout is None else timeout

    # --- tâches -------------------------------------------------

    def _client_email(self, n: BookingNotice):
        result = self.send_client_email(n.booking, n.car, n.pricing, n.extras)
        if not result.ok:
            raise NotificationError("client_email", result.error_message or "send failed")
        return result

    def _admin_email(self, n: BookingNotice):
        result = self.send_admin_email(n.booking, n.car, n.pricing, n.extras)
        if not result.ok:
            raise NotificationError("admin_email", result.error_message or "send failed")
        return result

    def _whatsapp(self, n: BookingNotice):
        b = n.booking
        message = whatsapp.build_admin_message(whatsapp.AdminBookingMessage(
            booking_id=b.id,
            car_name=n.car.name,
            start=b.start_at,
            end=b.end_at,
            days=n.pricing.days,
            pickup=b.pickup_location,
            dropoff=b.dropoff_location,
            deposit=n.car.deposit,
            total=n.pricing.total,
            daily_rate=n.pricing.daily_rate,
            client_name=b.name,
            client_phone=b.phone,
            client_email=b.email,
            client_whatsapp=b.whatsapp,
            flight_number=b.flight_number,
            extras=n.extras,
        ))
        self.send_whatsapp_admin(message)

    def _calendar(self, n: BookingNotice):
        b = n.booking
        result = self.create_calendar_event(calendar_events.CalendarEventRequest(
            booking_id=b.id,
            car_name=n.car.name,
            start=b.start_at,
            end=b.end_at,
            pickup=b.pickup_location,
            dropoff=b.dropoff_location,
            customer_name=b.name,
            customer_email=b.email,
            customer_phone=b.phone,
            deposit=n.car.deposit,
            total=n.total_estimate,
            status=b.status,
            extras=n.extras,
            notes=f"Flight: {b.flight_number}" if b.flight_number else None,
        ))
        if result.status == calendar_events.FAILED:
            raise NotificationError("calendar", result.error or "event creation failed")
        return result

    # --- orchestration ------------------------------------------

    @staticmethod
    def _run(name: str, task: Callable, notice: BookingNotice) -> NotificationResult:
        try:
            return NotificationResult(name=name, ok=True, value=task(notice))
        except NotificationError as e:
            return NotificationResult(name=name, ok=False, error=e.message)
        except Exception as e:
            return NotificationResult(name=name, ok=False, error=str(e))

    def dispatch(self, notice: BookingNotice) -> NotificationReport:
        tasks = {
            "client_email": self._client_email,
            "admin_email": self._admin_email,
            "whatsapp": self._whatsapp,
            "calendar": self._calendar,
        }
        report = NotificationReport()
        pool = ThreadPoolExecutor(max_workers=len(tasks), thread_name_prefix="notify")
        try:
            futures = {name: pool.submit(self._run, name, task, notice) for name, task in tasks.items()}
            wait(futures.values(), timeout=self.timeout)
            for name, fut in futures.items():
                if fut.done():
                    report.results[name] = fut.result()
                else:
                    # la tâche continue en arrière-plan, on ne l'attend plus
                    report.results[name] = NotificationResult(name=name, ok=False, error="timed out")
        finally:
            pool.shutdown(wait=False)

        if report.failures:
            logger.warning(
                "[booking] notifications failed booking=%s: %s",
                notice.booking.id,
                "; ".join(f"{r.name}: {r.error}" for r in report.failures),
            )
        return report
