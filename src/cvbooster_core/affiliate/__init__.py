from .commission import check_transition, compute_commission
from .service import AffiliateService, ClickOutcome, Visitor

__all__ = [
    "AffiliateService",
    "ClickOutcome",
    "Visitor",
    "check_transition",
    "compute_commission",
]
