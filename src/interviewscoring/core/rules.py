"""Rule tables and additive adjustments shared by the scoring components."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Rule(Generic[T]):
    """Predicate paired with the outcome it selects."""

    name: str
    predicate: Callable[[Any], bool]
    outcome: T


@dataclass(frozen=True, slots=True)
class Adjustment:
    """Conditional bonus (positive weight) or penalty (negative weight).

    ``weight`` may be a callable of the subject for value-dependent bonuses.
    ``label`` is formatted with the subject's attributes when the adjustment fires.
    """

    label: str
    condition: Callable[[Any], bool]
    weight: float | Callable[[Any], float]

    def resolve(self, subject: Any) -> float:
        if callable(self.weight):
            return float(self.weight(subject))
        return float(self.weight)


@dataclass(frozen=True, slots=True)
class FoldResult:
    value: float
    fired: list[str]


def first_match(rules: Iterable[Rule[T]], subject: Any) -> Rule[T] | None:
    """Return the first rule whose predicate holds for ``subject``."""
    for rule in rules:
        if rule.predicate(subject):
            return rule
    return None


def all_matches(rules: Iterable[Rule[T]], subject: Any) -> list[T]:
    """Return outcomes of every matching rule in table order."""
    return [rule.outcome for rule in rules if rule.predicate(subject)]


def fold_adjustments(
    base: float,
    adjustments: Sequence[Adjustment],
    subject: Any,
    *,
    lower: float,
    upper: float,
) -> FoldResult:
    """Sum every firing adjustment onto ``base`` and clamp once at the end."""
    total = float(base)
    fired: list[str] = []
    for adjustment in adjustments:
        if not adjustment.condition(subject):
            continue
        total += adjustment.resolve(subject)
        fired.append(_render_label(adjustment.label, subject))
    return FoldResult(value=clamp(total, lower, upper), fired=fired)


def clamp(value: float, lower: float, upper: float) -> float:
    return min(max(value, lower), upper)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (2.5 -> 3, 82.5 -> 83)."""
    return int(math.floor(value + 0.5))


def contains_any(text: str, phrases: Iterable[str]) -> bool:
    return any(phrase in text for phrase in phrases)


def _render_label(label: str, subject: Any) -> str:
    if "{" not in label:
        return label
    return label.format_map(_attributes(subject))


def _attributes(subject: Any) -> dict[str, Any]:
    if isinstance(subject, dict):
        return subject
    slots = getattr(type(subject), "__slots__", None)
    if slots:
        return {name: getattr(subject, name) for name in slots}
    return vars(subject)
