import re
from typing import Sequence

from .types import ConstraintBundle, Target


def target_passes_filters(target: Target, constraints: ConstraintBundle) -> bool:
    if constraints.min_priority is not None and target.priority is not None:
        if target.priority < constraints.min_priority:
            return False
    if constraints.min_depth_ppt is not None and target.depth_ppt is not None:
        if target.depth_ppt < constraints.min_depth_ppt:
            return False
    if constraints.max_magnitude is not None and target.magnitude is not None:
        if target.magnitude > constraints.max_magnitude:
            return False
    if constraints.name_pattern:
        if not re.search(constraints.name_pattern, target.name, flags=re.IGNORECASE):
            return False
    return True


def filter_targets(
    targets: Sequence[Target],
    constraints: ConstraintBundle,
) -> tuple[list[Target], int]:
    kept = [t for t in targets if target_passes_filters(t, constraints)]
    return kept, len(targets) - len(kept)
