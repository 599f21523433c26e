from enum import Enum


class PaymentStatus(str, Enum):
    collected = "collected"
    postponed = "postponed"
    overdue = "overdue"
    due = "due"
    upcoming = "upcoming"

    @property
    def color(self) -> str:
        return {
            PaymentStatus.collected: "success",
            PaymentStatus.due: "warning",
            PaymentStatus.postponed: "info",
            PaymentStatus.overdue: "danger",
            PaymentStatus.upcoming: "gray",
        }[self]


class ReconciliationCategory(str, Enum):
    unpaid_for_period = "unpaid_for_period"
    due_and_paid_in_period = "due_and_paid_in_period"
    late_collected_for_earlier_period = "late_collected_for_earlier_period"
    paid_late_after_period = "paid_late_after_period"
    collected_early_for_future_period = "collected_early_for_future_period"

    @property
    def counted(self) -> bool:
        return self in COUNTED_CATEGORIES


COUNTED_CATEGORIES = frozenset({
    ReconciliationCategory.due_and_paid_in_period,
    ReconciliationCategory.late_collected_for_earlier_period,
})


class SupplyStatus(str, Enum):
    pending = "pending"
    worth_collecting = "worth_collecting"
    collected = "collected"


class ApprovalStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
