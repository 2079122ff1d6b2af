"""Register Outlet Use Case."""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from cafe_ledger.application.dto.requests import RegisterOutletRequest
from cafe_ledger.application.dto.responses import OutletResponse
from cafe_ledger.application.services import get_clock
from cafe_ledger.config import get_logger, get_settings
from cafe_ledger.core.entities.outlet import Outlet
from cafe_ledger.core.exceptions import ValidationError
from cafe_ledger.core.interfaces.registry_store import IOutletStore
from cafe_ledger.core.services.clock import Clock

logger = get_logger(__name__)


class RegisterOutletUseCase:
    """Create an outlet with its business-day timezone."""

    def __init__(self, outlet_store: IOutletStore | None = None, clock: Clock | None = None):
        self._outlet_store = outlet_store
        self._clock = clock

    async def _get_outlet_store(self) -> IOutletStore:
        if self._outlet_store is None:
            from cafe_ledger.infrastructure.storage.sqlite import get_outlet_store

            self._outlet_store = await get_outlet_store()
        return self._outlet_store

    async def execute(self, request: RegisterOutletRequest) -> Outlet:
        """Execute register outlet use case."""
        name = request.name.strip()
        if not name:
            raise ValidationError("name", "must not be empty", request.name)

        tz_name = request.timezone or get_settings().ledger.default_timezone
        try:
            ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValidationError("timezone", "unknown IANA timezone", tz_name) from e

        clock = self._clock or get_clock()
        store = await self._get_outlet_store()
        outlet = await store.create_outlet(
            Outlet(name=name, timezone=tz_name, created_at=clock.now())
        )
        logger.info("outlet_registered", outlet_id=outlet.id, timezone=tz_name)
        return outlet

    def to_response(self, outlet: Outlet) -> OutletResponse:
        """Convert result to API response."""
        return OutletResponse.from_entity(outlet)
