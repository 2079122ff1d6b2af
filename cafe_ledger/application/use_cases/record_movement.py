"""Record Movement Use Case -- append one entry to the stock ledger."""

import math
from collections.abc import Callable
from dataclasses import dataclass

from cafe_ledger.application.dto.requests import RecordMovementRequest
from cafe_ledger.application.dto.responses import MovementResponse, RecordMovementResponse
from cafe_ledger.application.services import get_clock, new_unit_of_work
from cafe_ledger.config import get_logger, get_settings
from cafe_ledger.core.entities.movement import Direction, Movement
from cafe_ledger.core.entities.stock import normalize_quantity
from cafe_ledger.core.exceptions import (
    IdempotencyConflictError,
    InsufficientStockError,
    ItemNotFoundError,
    ItemRetiredError,
    ValidationError,
)
from cafe_ledger.core.interfaces.unit_of_work import IUnitOfWork
from cafe_ledger.core.services.clock import Clock

logger = get_logger(__name__)


@dataclass
class RecordMovementResult:
    """Result of recording a movement."""

    movement: Movement
    quantity_after: float
    replayed: bool = False


def validate_amount(amount: float) -> None:
    if not math.isfinite(amount) or amount <= 0:
        raise ValidationError("amount", "must be a positive number", amount)


async def append_movement(
    uow: IUnitOfWork,
    candidate: Movement,
    allow_negative_stock: bool,
    pending: dict[int, float] | None = None,
) -> RecordMovementResult:
    """
    Check and append ``candidate`` inside an open unit of work.

    ``pending`` carries stock already changed by earlier entries of the same
    batch, keyed by item id, so a batch checks against its own running total.
    """
    if candidate.idempotency_key:
        existing = await uow.movements.get_by_idempotency_key(candidate.idempotency_key)
        if existing is not None:
            if not existing.same_payload(candidate):
                raise IdempotencyConflictError(candidate.idempotency_key, existing.id or 0)
            item = await uow.items.get_item(existing.item_id)
            totals = await uow.movements.period_totals(
                existing.item_id,
                after_movement_id=item.checkpoint_movement_id if item else 0,
            )
            opening = item.opening_stock if item else 0.0
            logger.info(
                "movement_replayed",
                movement_id=existing.id,
                idempotency_key=candidate.idempotency_key,
            )
            return RecordMovementResult(
                movement=existing,
                quantity_after=normalize_quantity(opening + totals.net),
                replayed=True,
            )

    item = await uow.items.get_item(candidate.item_id)
    if item is None:
        raise ItemNotFoundError(candidate.item_id)
    if candidate.direction == Direction.OUTGOING and not item.is_active:
        raise ItemRetiredError(candidate.item_id)

    if pending is not None and candidate.item_id in pending:
        current = pending[candidate.item_id]
    else:
        totals = await uow.movements.period_totals(
            candidate.item_id, after_movement_id=item.checkpoint_movement_id
        )
        current = normalize_quantity(item.opening_stock + totals.net)

    quantity_after = normalize_quantity(current + candidate.signed_amount)
    if (
        candidate.direction == Direction.OUTGOING
        and not allow_negative_stock
        and quantity_after < 0
    ):
        logger.warning(
            "movement_rejected_insufficient_stock",
            item_id=candidate.item_id,
            requested=candidate.amount,
            available=current,
        )
        raise InsufficientStockError(candidate.item_id, candidate.amount, current)

    candidate.outlet_id = item.outlet_id
    movement = await uow.movements.add_movement(candidate)
    if pending is not None:
        pending[candidate.item_id] = quantity_after

    return RecordMovementResult(movement=movement, quantity_after=quantity_after)


class RecordMovementUseCase:
    """
    Append a movement to the ledger.

    The idempotency lookup, stock check and insert share one write-locked
    transaction, so two concurrent outgoing movements on the same item are
    checked one after the other.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork] | None = None,
        clock: Clock | None = None,
        allow_negative_stock: bool | None = None,
    ):
        self._uow_factory = uow_factory or new_unit_of_work
        self._clock = clock
        self._allow_negative_stock = allow_negative_stock

    @property
    def allow_negative_stock(self) -> bool:
        if self._allow_negative_stock is None:
            return get_settings().ledger.allow_negative_stock
        return self._allow_negative_stock

    async def execute(self, request: RecordMovementRequest) -> RecordMovementResult:
        """Execute record movement use case."""
        validate_amount(request.amount)
        clock = self._clock or get_clock()

        async with self._uow_factory() as uow:
            candidate = Movement(
                item_id=request.item_id,
                outlet_id=0,
                direction=request.direction,
                amount=request.amount,
                reason=request.reason,
                note=request.note,
                reference=request.reference,
                idempotency_key=request.idempotency_key,
                created_at=clock.now(),
            )
            return await append_movement(uow, candidate, self.allow_negative_stock)

    def to_response(self, result: RecordMovementResult) -> RecordMovementResponse:
        """Convert result to API response."""
        return RecordMovementResponse(
            movement=MovementResponse.from_entity(result.movement),
            quantity_after=result.quantity_after,
            replayed=result.replayed,
        )
