"""Application use cases."""

from cafe_ledger.application.use_cases.close_day import CloseDayResult, CloseDayUseCase
from cafe_ledger.application.use_cases.export_ledger_csv import ExportLedgerCsvUseCase
from cafe_ledger.application.use_cases.get_movement_history import (
    GetMovementHistoryUseCase,
    MovementHistoryResult,
)
from cafe_ledger.application.use_cases.record_movement import (
    RecordMovementResult,
    RecordMovementUseCase,
)
from cafe_ledger.application.use_cases.record_order_consumption import (
    OrderConsumptionResult,
    RecordOrderConsumptionUseCase,
)
from cafe_ledger.application.use_cases.register_item import RegisterItemUseCase
from cafe_ledger.application.use_cases.register_outlet import RegisterOutletUseCase
from cafe_ledger.application.use_cases.retire_item import RetireItemUseCase
from cafe_ledger.application.use_cases.update_item import UpdateItemUseCase

__all__ = [
    "RegisterOutletUseCase",
    "RegisterItemUseCase",
    "UpdateItemUseCase",
    "RetireItemUseCase",
    "RecordMovementUseCase",
    "RecordMovementResult",
    "RecordOrderConsumptionUseCase",
    "OrderConsumptionResult",
    "GetMovementHistoryUseCase",
    "MovementHistoryResult",
    "CloseDayUseCase",
    "CloseDayResult",
    "ExportLedgerCsvUseCase",
]
