"""FastAPI endpoints for vacation mode."""

from fastapi import APIRouter
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    EndVacationRequest,
    Envelope,
    IdView,
    NotifyResultView,
    StartVacationRequest,
    SubscribeRequest,
    VacationStatusView,
    VacationView,
)
from storefront.vacation.management import (
    EndVacation,
    NotifySubscribers,
    StartVacation,
    SubscribeToReopening,
    current_vacation,
)
from storefront.vacation.period import VacationPeriod

router = APIRouter(prefix="/api/vacation", tags=["vacation"])


@router.get("", response_model=Envelope[VacationStatusView])
async def vacation_status() -> Envelope[VacationStatusView]:
    period = current_vacation()
    return Envelope(
        data=VacationStatusView(
            active=period is not None,
            period=VacationView.from_period(period) if period else None,
        )
    )


@router.post("", status_code=201, response_model=Envelope[VacationView])
async def start_vacation(body: StartVacationRequest) -> Envelope[VacationView]:
    period_id = current_domain.process(StartVacation(**body.model_dump(exclude_none=True)), asynchronous=False)
    period = current_domain.repository_for(VacationPeriod).get(period_id)
    return Envelope(data=VacationView.from_period(period))


@router.post("/end", response_model=Envelope[IdView])
async def end_vacation(body: EndVacationRequest | None = None) -> Envelope[IdView]:
    reason = body.reason if body else None
    period_id = current_domain.process(EndVacation(reason=reason), asynchronous=False)
    return Envelope(data=IdView(id=period_id))


@router.post("/subscribe", status_code=201, response_model=Envelope[IdView])
async def subscribe(body: SubscribeRequest) -> Envelope[IdView]:
    subscriber_id = current_domain.process(SubscribeToReopening(email=body.email), asynchronous=False)
    return Envelope(data=IdView(id=subscriber_id))


@router.post("/{period_id}/notify", response_model=Envelope[NotifyResultView])
def notify_subscribers(period_id: str) -> Envelope[NotifyResultView]:
    result = current_domain.process(NotifySubscribers(period_id=period_id), asynchronous=False)
    return Envelope(data=NotifyResultView(**result))
