from __future__ import annotations
from typing import Any, Callable

from .models import Classification, Status

Classifier = Callable[[Any], Classification]


def above(threshold: float, label: str, unit: str = "%") -> Classifier:
    """Warn when the measured value is strictly greater than ``threshold``."""

    def classify(value: float) -> Classification:
        shown = f"{value:g}{unit}"
        if value > threshold:
            return Status.WARNING, f"{label} {shown} exceeds threshold {threshold:g}{unit}"
        return Status.HEALTHY, f"{label} {shown} (threshold {threshold:g}{unit})"

    return classify


def below(threshold: float, label: str, unit: str = "%") -> Classifier:
    """Warn when the measured value is strictly less than ``threshold``."""

    def classify(value: float) -> Classification:
        shown = f"{value:g}{unit}"
        if value < threshold:
            return Status.WARNING, f"{label} {shown} is below threshold {threshold:g}{unit}"
        return Status.HEALTHY, f"{label} {shown} (threshold {threshold:g}{unit})"

    return classify


def none_listed(what: str) -> Classifier:
    """Healthy for an empty list of offenders, Warning naming them otherwise."""

    def classify(items: list[str]) -> Classification:
        if not items:
            return Status.HEALTHY, f"no {what}"
        shown = ", ".join(items[:5])
        if len(items) > 5:
            shown += f" (+{len(items) - 5} more)"
        return Status.WARNING, f"{len(items)} {what}: {shown}"

    return classify


def manual(instruction: str) -> Classifier:
    """Constant classifier for items a human has to verify."""

    def classify(_: Any) -> Classification:
        return Status.MANUAL_CHECK, instruction

    return classify


def no_query(_: Any) -> None:
    """Query used by manual checks; never touches the connection."""
    return None
