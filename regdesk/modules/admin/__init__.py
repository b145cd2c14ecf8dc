"""Administrative aggregation views."""

from .models import AmountBucket, PaymentStats, RegistrationStats, StatsSnapshot
from .service import AggregationService

__all__ = ["AggregationService", "AmountBucket", "PaymentStats", "RegistrationStats", "StatsSnapshot"]
