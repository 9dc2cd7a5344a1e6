"""Vacation mode: store closure windows and reopening subscribers.

At most one period is active at a time. Each subscriber is notified at most
once per period; the flag is only set after the email was accepted.
"""

import re
from datetime import UTC, datetime

from protean.fields import Boolean, DateTime, HasMany, String, Text

from storefront.domain import storefront
from storefront.errors import ConflictError, ValidationError

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _aware(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


@storefront.entity(part_of="VacationPeriod")
class VacationSubscriber:
    email = String(required=True, max_length=254)
    subscribed_at = DateTime()
    notified = Boolean(default=False)
    notified_at = DateTime()


@storefront.aggregate
class VacationPeriod:
    title = String(required=True, max_length=200)
    message = Text()
    start_date = DateTime()
    end_date = DateTime()
    show_email_collection = Boolean(default=True)
    is_active = Boolean(default=True)
    closed_at = DateTime()
    subscribers = HasMany(VacationSubscriber)
    created_at = DateTime()

    @classmethod
    def start(
        cls,
        title: str,
        message: str | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        show_email_collection: bool = True,
    ):
        start_date = _aware(start_date)
        end_date = _aware(end_date)
        if start_date and end_date and end_date < start_date:
            raise ValidationError("La fecha de fin no puede ser anterior a la de inicio")

        return cls(
            title=title,
            message=message,
            start_date=start_date,
            end_date=end_date,
            show_email_collection=show_email_collection,
            is_active=True,
            created_at=datetime.now(UTC),
        )

    def end(self) -> None:
        if not self.is_active:
            raise ConflictError("El período de vacaciones ya está cerrado")
        self.is_active = False
        self.closed_at = datetime.now(UTC)

    def subscribe(self, email: str) -> VacationSubscriber:
        if not self.is_active:
            raise ConflictError("La tienda no está de vacaciones")
        if not self.show_email_collection:
            raise ConflictError("Este período no admite suscripciones")

        email = (email or "").strip().lower()
        if not _EMAIL.match(email):
            raise ValidationError(f"Email inválido: {email}")

        existing = next((s for s in (self.subscribers or []) if s.email == email), None)
        if existing is not None:
            return existing

        subscriber = VacationSubscriber(email=email, subscribed_at=datetime.now(UTC))
        self.add_subscribers(subscriber)
        return subscriber

    def pending_subscribers(self) -> list[VacationSubscriber]:
        return [s for s in (self.subscribers or []) if not s.notified]

    def mark_notified(self, subscriber: VacationSubscriber) -> None:
        subscriber.notified = True
        subscriber.notified_at = datetime.now(UTC)
