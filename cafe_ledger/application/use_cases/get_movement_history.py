"""Movement History Use Case -- paged, time-ordered ledger reads."""

from dataclasses import dataclass, field

from cafe_ledger.application.dto.requests import MovementHistoryRequest
from cafe_ledger.application.dto.responses import MovementHistoryResponse, MovementResponse
from cafe_ledger.config import get_settings
from cafe_ledger.core.entities.movement import Movement
from cafe_ledger.core.exceptions import OutletNotFoundError, ValidationError
from cafe_ledger.core.interfaces.ledger_store import IMovementStore
from cafe_ledger.core.interfaces.registry_store import IOutletStore


@dataclass
class MovementHistoryResult:
    """One page of movements."""

    outlet_id: int
    item_id: int | None
    limit: int
    offset: int
    movements: list[Movement] = field(default_factory=list)


class GetMovementHistoryUseCase:
    """List movements ordered by (created_at, id) ascending."""

    def __init__(
        self,
        outlet_store: IOutletStore | None = None,
        movement_store: IMovementStore | None = None,
    ):
        self._outlet_store = outlet_store
        self._movement_store = movement_store

    async def _get_outlet_store(self) -> IOutletStore:
        if self._outlet_store is None:
            from cafe_ledger.infrastructure.storage.sqlite import get_outlet_store

            self._outlet_store = await get_outlet_store()
        return self._outlet_store

    async def _get_movement_store(self) -> IMovementStore:
        if self._movement_store is None:
            from cafe_ledger.infrastructure.storage.sqlite import get_movement_store

            self._movement_store = await get_movement_store()
        return self._movement_store

    async def execute(self, request: MovementHistoryRequest) -> MovementHistoryResult:
        """Execute movement history use case."""
        if (
            request.from_time is not None
            and request.to_time is not None
            and request.from_time > request.to_time
        ):
            raise ValidationError("from", "must not be after 'to'", request.from_time)

        ledger = get_settings().ledger
        limit = min(request.limit or ledger.history_page_size, ledger.history_max_page_size)

        outlet_store = await self._get_outlet_store()
        if await outlet_store.get_outlet(request.outlet_id) is None:
            raise OutletNotFoundError(request.outlet_id)

        store = await self._get_movement_store()
        movements = await store.list_movements(
            request.outlet_id,
            item_id=request.item_id,
            start=request.from_time,
            end=request.to_time,
            limit=limit,
            offset=request.offset,
        )
        return MovementHistoryResult(
            outlet_id=request.outlet_id,
            item_id=request.item_id,
            limit=limit,
            offset=request.offset,
            movements=movements,
        )

    def to_response(self, result: MovementHistoryResult) -> MovementHistoryResponse:
        """Convert result to API response."""
        return MovementHistoryResponse(
            outlet_id=result.outlet_id,
            item_id=result.item_id,
            movements=[MovementResponse.from_entity(m) for m in result.movements],
            limit=result.limit,
            offset=result.offset,
            count=len(result.movements),
        )
