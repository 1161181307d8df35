from dataclasses import dataclass
import csv
import logging
from pathlib import Path

from .base import TargetProvider
from .fields import build_target
from transitfinder.errors import InputError, TargetDataError
from transitfinder.planner.types import Target, TargetIssue, TargetList

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("name", "RA", "Dec")


@dataclass
class CsvTargetListProvider(TargetProvider):
    name: str = "csv"
    catalog_path: Path | None = None

    def list_targets(self) -> TargetList:
        if self.catalog_path is None:
            raise TargetDataError("No target list path configured")
        path = Path(self.catalog_path)
        targets: list[Target] = []
        issues: list[TargetIssue] = []
        try:
            with open(path, "r", encoding="utf-8", newline="") as f:
                reader = csv.DictReader(f)
                missing = [c for c in REQUIRED_COLUMNS if c not in (reader.fieldnames or [])]
                if missing:
                    raise TargetDataError(
                        f"Target list {path} is missing columns: {', '.join(missing)}"
                    )
                for row in reader:
                    # Header is line 1.
                    line_number = reader.line_num
                    label = (row.get("name") or "").strip() or f"line {line_number}"
                    try:
                        targets.append(
                            build_target(
                                name=row.get("name"),
                                ra=row.get("RA"),
                                dec=row.get("Dec"),
                                magnitude=row.get("vmag"),
                                epoch=row.get("epoch"),
                                epoch_uncertainty=row.get("epoch_uncertainty"),
                                period=row.get("period"),
                                period_uncertainty=row.get("period_uncertainty"),
                                duration=row.get("duration"),
                                comments=row.get("comments"),
                                priority=row.get("priority"),
                                depth=row.get("depth"),
                                observation_type=row.get("obs_type"),
                                line_number=line_number,
                            )
                        )
                    except InputError as e:
                        issues.append(
                            TargetIssue(
                                name=label,
                                kind="malformed",
                                message=str(e),
                                line_number=line_number,
                            )
                        )
        except (OSError, csv.Error) as e:
            raise TargetDataError(f"Cannot read target list {path}: {e}") from e

        logger.info(f"Loaded {len(targets)} targets from {path} ({len(issues)} skipped)")
        return TargetList(targets=targets, issues=issues)
