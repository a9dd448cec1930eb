"""Declarative field rules for the wizard's form steps."""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass


def _not_blank(value: object) -> bool:
    return isinstance(value, str) and value.strip() != ""


@dataclass(frozen=True)
class FieldRule:
    """A predicate that one form field must satisfy."""

    field: str
    check: Callable[[object], bool] = _not_blank
    message: str = "is required"


def required(field: str) -> FieldRule:
    return FieldRule(field=field)


DETAILS_RULES: tuple[FieldRule, ...] = (
    required("name"),
    required("client_alias"),
)


def failing_fields(rules: Iterable[FieldRule], values: Mapping[str, object]) -> list[str]:
    """Names of the fields whose rule fails, in rule order, without duplicates."""
    failing: list[str] = []
    for rule in rules:
        if not rule.check(values.get(rule.field)) and rule.field not in failing:
            failing.append(rule.field)
    return failing
