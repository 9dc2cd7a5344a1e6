"""Vacation mode commands and the banner query."""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import ConflictError, NotFoundError
from storefront.notifications.dispatch import send_best_effort
from storefront.notifications.templates import EmailKind
from storefront.vacation.period import VacationPeriod

logger = structlog.get_logger(__name__)


@storefront.command(part_of="VacationPeriod")
class StartVacation:
    title = String(required=True, max_length=200)
    message = Text()
    start_date = DateTime()
    end_date = DateTime()
    show_email_collection = Boolean(default=True)


@storefront.command(part_of="VacationPeriod")
class EndVacation:
    reason = String(max_length=200)


@storefront.command(part_of="VacationPeriod")
class SubscribeToReopening:
    email = String(required=True, max_length=254)


@storefront.command(part_of="VacationPeriod")
class NotifySubscribers:
    period_id = Identifier(required=True)


def current_vacation() -> VacationPeriod | None:
    results = current_domain.repository_for(VacationPeriod)._dao.query.filter(is_active=True).all()
    return results.first if results.items else None


def _require_active() -> VacationPeriod:
    period = current_vacation()
    if period is None:
        raise ConflictError("La tienda no está de vacaciones")
    return period


@storefront.command_handler(part_of=VacationPeriod)
class VacationHandler:
    @handle(StartVacation)
    def start_vacation(self, command):
        if current_vacation() is not None:
            raise ConflictError("Ya hay un período de vacaciones activo")

        period = VacationPeriod.start(
            title=command.title,
            message=command.message,
            start_date=command.start_date,
            end_date=command.end_date,
            show_email_collection=command.show_email_collection,
        )
        current_domain.repository_for(VacationPeriod).add(period)
        logger.info("Vacation mode started", period_id=str(period.id))
        return str(period.id)

    @handle(EndVacation)
    def end_vacation(self, command):
        period = _require_active()
        period.end()
        current_domain.repository_for(VacationPeriod).add(period)
        logger.info(
            "Vacation mode ended",
            period_id=str(period.id),
            reason=command.reason,
            subscribers=len(period.subscribers or []),
        )
        return str(period.id)

    @handle(SubscribeToReopening)
    def subscribe(self, command):
        period = _require_active()
        subscriber = period.subscribe(command.email)
        current_domain.repository_for(VacationPeriod).add(period)
        return str(subscriber.id)

    @handle(NotifySubscribers)
    def notify_subscribers(self, command):
        repo = current_domain.repository_for(VacationPeriod)
        try:
            period = repo.get(command.period_id)
        except ObjectNotFoundError as exc:
            raise NotFoundError("Período de vacaciones no encontrado") from exc
        if period.is_active:
            raise ConflictError("El período de vacaciones sigue activo")

        notified = failed = 0
        for subscriber in period.pending_subscribers():
            if send_best_effort(EmailKind.STORE_REOPENED, subscriber.email, {"period_id": str(period.id)}):
                period.mark_notified(subscriber)
                notified += 1
            else:
                failed += 1

        repo.add(period)
        logger.info("Reopening notifications sent", period_id=str(period.id), notified=notified, failed=failed)
        return {"notified": notified, "failed": failed}
