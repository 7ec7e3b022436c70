"""Per-user question selection for standard (non-360) assessments.

An assessment's selection settings are resolved once into a
``SelectionPolicy``:

* ``PerDimension`` - draw a fixed number of questions from each dimension
  (``dimension_question_counts``); the ``"null"`` / ``""`` keys address
  questions that have no dimension.
* ``FlatCount`` - draw ``number_of_questions`` from the whole pool.
* ``NoSelection`` - draw nothing; the respondent sees the full instrument.
  Every 360 assessment resolves to this.

Sampling is uniform without replacement and the result is always put back
into authored order, so a respondent never sees questions shuffled.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from ...models.assessment import Assessment, Field

UNASSIGNED_DIMENSION_KEYS = ("null", "")


@dataclass(frozen=True)
class PerDimension:
    counts: Dict[str, int] = field(default_factory=dict)
    unassigned: int = 0


@dataclass(frozen=True)
class FlatCount:
    count: int


@dataclass(frozen=True)
class NoSelection:
    pass


SelectionPolicy = Union[PerDimension, FlatCount, NoSelection]


def _positive_int(value: Any) -> Optional[int]:
    # bool is an int subclass; JSON true must not count as 1
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if value > 0 else None


def resolve_selection_policy(assessment: Assessment) -> SelectionPolicy:
    if assessment.is_360:
        return NoSelection()

    raw_counts = assessment.dimension_question_counts
    if isinstance(raw_counts, dict):
        counts: Dict[str, int] = {}
        unassigned = 0
        for key, value in raw_counts.items():
            count = _positive_int(value)
            if count is None:
                continue
            if key in UNASSIGNED_DIMENSION_KEYS:
                # "null" wins over "" when both are configured
                if key == "null" or not unassigned:
                    unassigned = count
                continue
            counts[str(key)] = count
        if counts or unassigned:
            return PerDimension(counts=counts, unassigned=unassigned)

    flat = _positive_int(assessment.number_of_questions)
    if flat is not None:
        return FlatCount(flat)
    return NoSelection()


def _sample(pool: Sequence[Field], count: int, rng: random.Random) -> List[Field]:
    shuffled = list(pool)
    rng.shuffle(shuffled)
    return shuffled[: min(count, len(shuffled))]


def select_fields(
    fields: Sequence[Field],
    policy: SelectionPolicy,
    rng: Optional[random.Random] = None,
) -> List[Field]:
    """Pick the questions one respondent will see, in authored order.

    ``fields`` must already exclude instructions and page breaks.
    """
    rng = rng or random.Random()

    if isinstance(policy, PerDimension):
        selected: List[Field] = []
        for dimension_id, count in policy.counts.items():
            pool = [f for f in fields if f.dimension_id == dimension_id]
            selected.extend(_sample(pool, count, rng))
        if policy.unassigned:
            pool = [f for f in fields if not f.dimension_id]
            selected.extend(_sample(pool, policy.unassigned, rng))
    elif isinstance(policy, FlatCount):
        selected = _sample(fields, policy.count, rng)
    else:
        return []

    return sorted(selected, key=lambda f: f.order or 0)
