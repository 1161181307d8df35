from .constraints import build_constraints
from .finder import TransitFinder
from .observatories import get_observatory, list_observatories
from .types import (
    AnyTimeRecord,
    ConstraintBundle,
    Ephemeris,
    EventRecord,
    FinderResult,
    ManualSite,
    NamedObservatory,
    ObservationType,
    ScheduledEvent,
    Site,
    Target,
    TargetIssue,
)

__all__ = [
    "TransitFinder",
    "build_constraints",
    "get_observatory",
    "list_observatories",
    "AnyTimeRecord",
    "ConstraintBundle",
    "Ephemeris",
    "EventRecord",
    "FinderResult",
    "ManualSite",
    "NamedObservatory",
    "ObservationType",
    "ScheduledEvent",
    "Site",
    "Target",
    "TargetIssue",
]
