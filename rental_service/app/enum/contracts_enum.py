from enum import Enum


class ContractStatus(str, Enum):
    draft = "draft"
    active = "active"
    renewed = "renewed"
    expired = "expired"
    terminated = "terminated"


# statuses that block the timeline of a unit / property
BLOCKING_CONTRACT_STATUSES = (ContractStatus.active.value, ContractStatus.draft.value)


class PaymentFrequency(str, Enum):
    monthly = "monthly"
    quarterly = "quarterly"
    semi_annually = "semi_annually"
    annually = "annually"

    @property
    def months(self) -> int:
        return FREQUENCY_MONTHS[self]


FREQUENCY_MONTHS = {
    PaymentFrequency.monthly: 1,
    PaymentFrequency.quarterly: 3,
    PaymentFrequency.semi_annually: 6,
    PaymentFrequency.annually: 12,
}


class ContractKind(str, Enum):
    unit = "unit"            # tenant <-> unit lease
    property = "property"    # owner <-> property management
