"""Typed failures raised by the contract schedule engine.

Each error carries an ``AppStatusCode`` and a ``details`` dict that the API
layer returns as the ``data`` of the failure envelope.
"""
from datetime import date
from typing import Any, Dict, Optional

from shared.utils.app_status_code import AppStatusCode


class ContractEngineError(ValueError):
    status_code = AppStatusCode.OPERATION_FAILED
    http_status = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class DurationDivisionError(ContractEngineError):
    status_code = AppStatusCode.DURATION_NOT_DIVISIBLE

    def __init__(self, months: int, frequency: str, months_per_payment: int):
        super().__init__(
            f"Duration of {months} month(s) is not divisible by the {frequency} "
            f"payment period of {months_per_payment} month(s)",
            {
                "duration_months": months,
                "payment_frequency": frequency,
                "months_per_payment": months_per_payment,
            },
        )
        self.months = months
        self.frequency = frequency
        self.months_per_payment = months_per_payment


class OverlapError(ContractEngineError):
    status_code = AppStatusCode.CONTRACT_OVERLAP
    http_status = 409

    def __init__(
        self,
        contract_number: str,
        start_date: date,
        end_date: date,
        contract_id: Any = None,
        message: Optional[str] = None,
    ):
        super().__init__(
            message or (
                f"Period overlaps contract {contract_number} "
                f"from {start_date.isoformat()} to {end_date.isoformat()}"
            ),
            {
                "conflicting_contract_id": str(contract_id) if contract_id else None,
                "conflicting_contract_number": contract_number,
                "conflicting_start_date": start_date.isoformat(),
                "conflicting_end_date": end_date.isoformat(),
            },
        )
        self.contract_id = contract_id
        self.contract_number = contract_number
        self.start_date = start_date
        self.end_date = end_date


class RescheduleConflictError(OverlapError):
    status_code = AppStatusCode.RESCHEDULE_CONFLICT


class DateOrderError(ContractEngineError):
    status_code = AppStatusCode.INVALID_DATE_RANGE

    def __init__(self, start_date: Optional[date], end_date: Optional[date]):
        super().__init__(
            f"Start date {start_date} must be before end date {end_date}",
            {
                "start_date": start_date.isoformat() if start_date else None,
                "end_date": end_date.isoformat() if end_date else None,
            },
        )


class StaleStateError(ContractEngineError):
    status_code = AppStatusCode.STALE_STATE
    http_status = 409


class ContractStateError(ContractEngineError):
    status_code = AppStatusCode.CONTRACT_STATE_INVALID


class PaymentStateError(ContractEngineError):
    status_code = AppStatusCode.PAYMENT_STATE_INVALID
