from dataclasses import dataclass
import logging
from pathlib import Path

from .base import TargetProvider
from .fields import build_target
from transitfinder.errors import InputError, TargetDataError
from transitfinder.planner.types import Target, TargetIssue, TargetList

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = ",."
FIELD_NAMES = (
    "name",
    "ra",
    "dec",
    "magnitude",
    "epoch",
    "period",
    "duration",
    "comments",
    "priority",
    "depth",
    "observation_type",
)
# Name, coordinates and magnitude are required; the rest may be left off.
MIN_FIELDS = 4


@dataclass
class FlatTargetListProvider(TargetProvider):
    """One target per line, fields separated by ``,.`` so comments may hold commas."""

    name: str = "flat"
    catalog_path: Path | None = None

    def list_targets(self) -> TargetList:
        if self.catalog_path is None:
            raise TargetDataError("No target list path configured")
        path = Path(self.catalog_path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                lines = f.readlines()
        except OSError as e:
            raise TargetDataError(f"Cannot read target list {path}: {e}") from e

        targets: list[Target] = []
        issues: list[TargetIssue] = []
        for line_number, line in enumerate(lines, start=1):
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            fields = [f.strip() for f in stripped.split(FIELD_SEPARATOR)]
            label = fields[0] or f"line {line_number}"
            if len(fields) < MIN_FIELDS or len(fields) > len(FIELD_NAMES):
                issues.append(
                    TargetIssue(
                        name=label,
                        kind="malformed",
                        message=f"expected {MIN_FIELDS}-{len(FIELD_NAMES)} fields, got {len(fields)}",
                        line_number=line_number,
                    )
                )
                continue
            try:
                targets.append(
                    build_target(line_number=line_number, **dict(zip(FIELD_NAMES, fields)))
                )
            except InputError as e:
                issues.append(
                    TargetIssue(name=label, kind="malformed", message=str(e), line_number=line_number)
                )

        logger.info(f"Loaded {len(targets)} targets from {path} ({len(issues)} skipped)")
        return TargetList(targets=targets, issues=issues)
