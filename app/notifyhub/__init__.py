"""NotifyHub: preference-driven routing of email and SMS notifications."""

from .batch import BatchOrchestrator, classify_outcome
from .dispatcher import DispatchExecutor
from .models import (
    BatchResult,
    ChannelResult,
    DispatchOptions,
    DispatchResult,
    StatusCounts,
    UserPreference,
)
from .planner import ChannelPlan, ChannelPlanner
from .service import NotificationService

__all__ = [
    "BatchOrchestrator",
    "BatchResult",
    "ChannelPlan",
    "ChannelPlanner",
    "ChannelResult",
    "DispatchExecutor",
    "DispatchOptions",
    "DispatchResult",
    "NotificationService",
    "StatusCounts",
    "UserPreference",
    "classify_outcome",
]
