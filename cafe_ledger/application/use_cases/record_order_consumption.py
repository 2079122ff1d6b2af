"""Record Order Consumption Use Case -- ingredients used by a fulfilled order."""

from collections.abc import Callable
from dataclasses import dataclass, field

from cafe_ledger.application.dto.requests import RecordOrderConsumptionRequest
from cafe_ledger.application.dto.responses import MovementResponse, OrderConsumptionResponse
from cafe_ledger.application.services import get_clock, new_unit_of_work
from cafe_ledger.application.use_cases.record_movement import (
    append_movement,
    validate_amount,
)
from cafe_ledger.config import get_logger, get_settings
from cafe_ledger.core.entities.movement import Direction, Movement, MovementReason
from cafe_ledger.core.interfaces.unit_of_work import IUnitOfWork
from cafe_ledger.core.services.clock import Clock

logger = get_logger(__name__)


def order_line_key(order_ref: str, index: int) -> str:
    """Idempotency key of one order line."""
    return f"order:{order_ref}:{index}"


@dataclass
class OrderConsumptionResult:
    """Result of recording an order's consumption."""

    order_ref: str
    movements: list[Movement] = field(default_factory=list)
    replayed: bool = False


class RecordOrderConsumptionUseCase:
    """Record one Outgoing "Order Consumption" movement per order line, all or none."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork] | None = None,
        clock: Clock | None = None,
        allow_negative_stock: bool | None = None,
    ):
        self._uow_factory = uow_factory or new_unit_of_work
        self._clock = clock
        self._allow_negative_stock = allow_negative_stock

    async def execute(self, request: RecordOrderConsumptionRequest) -> OrderConsumptionResult:
        """Execute record order consumption use case."""
        for line in request.lines:
            validate_amount(line.quantity)

        allow_negative = self._allow_negative_stock
        if allow_negative is None:
            allow_negative = get_settings().ledger.allow_negative_stock
        clock = self._clock or get_clock()

        logger.info(
            "order_consumption_started",
            order_ref=request.order_ref,
            lines=len(request.lines),
        )

        result = OrderConsumptionResult(order_ref=request.order_ref)
        replays = 0
        async with self._uow_factory() as uow:
            now = clock.now()
            pending: dict[int, float] = {}
            for index, line in enumerate(request.lines):
                candidate = Movement(
                    item_id=line.item_id,
                    outlet_id=0,
                    direction=Direction.OUTGOING,
                    amount=line.quantity,
                    reason=MovementReason.ORDER_CONSUMPTION,
                    note=request.note,
                    reference=request.order_ref,
                    idempotency_key=order_line_key(request.order_ref, index),
                    created_at=now,
                )
                recorded = await append_movement(uow, candidate, allow_negative, pending)
                result.movements.append(recorded.movement)
                if recorded.replayed:
                    replays += 1

        result.replayed = replays == len(request.lines)
        logger.info(
            "order_consumption_complete",
            order_ref=request.order_ref,
            movements=len(result.movements),
            replayed=result.replayed,
        )
        return result

    def to_response(self, result: OrderConsumptionResult) -> OrderConsumptionResponse:
        """Convert result to API response."""
        return OrderConsumptionResponse(
            order_ref=result.order_ref,
            movements=[MovementResponse.from_entity(m) for m in result.movements],
            replayed=result.replayed,
        )
