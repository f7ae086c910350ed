from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, FrozenSet, Union

from ..exceptions import InvalidCommissionTransition
from ..models import CommissionStatus

# Allowed moves of the external billing reconciliation
_TRANSITIONS: Dict[CommissionStatus, FrozenSet[CommissionStatus]] = {
    CommissionStatus.PENDING: frozenset({CommissionStatus.VALIDATED, CommissionStatus.CANCELLED}),
    CommissionStatus.VALIDATED: frozenset({CommissionStatus.PAID, CommissionStatus.CANCELLED}),
    CommissionStatus.PAID: frozenset(),
    CommissionStatus.CANCELLED: frozenset(),
}


def compute_commission(subscription_amount: int, commission_rate: Union[int, float]) -> int:
    """Commission in cents: amount * rate / 100, halves rounded up."""
    raw = Decimal(subscription_amount) * Decimal(str(commission_rate)) / Decimal(100)
    return int(raw.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def check_transition(current: Union[str, CommissionStatus], target: Union[str, CommissionStatus]) -> CommissionStatus:
    """Validate a status change and return the target status."""
    try:
        current_status = CommissionStatus(current)
        target_status = CommissionStatus(target)
    except ValueError:
        raise InvalidCommissionTransition(str(current), str(target))

    if target_status not in _TRANSITIONS[current_status]:
        raise InvalidCommissionTransition(current_status.value, target_status.value)
    return target_status


def cents_to_euros(amount: int) -> float:
    return round(amount / 100, 2)
