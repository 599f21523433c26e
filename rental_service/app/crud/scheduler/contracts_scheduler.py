import logging
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from rental_service.app.enum.contracts_enum import ContractStatus
from rental_service.app.models.contracts.property_contracts import PropertyContract
from rental_service.app.models.contracts.unit_contracts import UnitContract
from rental_service.app.schemas.contracts.contracts_schemas import ExpirySweepResult

logger = logging.getLogger(__name__)

EXPIRY_NOTICE_DAYS = 7


def expire_contracts(db: Session, today: Optional[date] = None) -> ExpirySweepResult:
    """Mark active contracts whose end date has passed as expired."""
    today = today or date.today()
    result = ExpirySweepResult()

    try:
        for model in (UnitContract, PropertyContract):
            # =====================================================
            # ENDED CONTRACTS
            # =====================================================
            ended = (
                db.query(model)
                .filter(model.status == ContractStatus.active.value, model.end_date < today)
                .all()
            )
            for contract in ended:
                contract.status = ContractStatus.expired.value
                result.expired.append(contract.contract_number)
                logger.info("Contract %s expired on %s", contract.contract_number, contract.end_date)

            # =====================================================
            # ENDING SOON
            # =====================================================
            soon = (
                db.query(model.contract_number)
                .filter(
                    model.status == ContractStatus.active.value,
                    model.end_date >= today,
                    model.end_date <= today + timedelta(days=EXPIRY_NOTICE_DAYS),
                )
                .all()
            )
            result.expiring_soon.extend(row.contract_number for row in soon)

        db.commit()
    except Exception:
        db.rollback()
        raise

    return result
