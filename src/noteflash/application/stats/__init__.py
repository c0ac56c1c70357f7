# Application Stats Package
from .metrics_calculator import MetricsCalculator, RetentionMetrics, ReviewStats
from .service import StatsService

__all__ = ["MetricsCalculator", "RetentionMetrics", "ReviewStats", "StatsService"]
