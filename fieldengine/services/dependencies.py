"""Conditional visibility rules for custom fields.

A definition's ``dependencies`` payload holds at most one ``showIf`` clause::

    {"showIf": {"fieldKey": "manager_name", "operator": "notEmpty"}}

Payloads are parsed once into :class:`ShowIf`, :class:`NoCondition` or
:class:`Unparseable`. Everything that cannot be understood keeps the field
visible.
"""
from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShowIf:
    field_key: str
    operator: str
    value: Any = None


@dataclass(frozen=True)
class NoCondition:
    """Parsed payload without a ``showIf`` clause."""


@dataclass(frozen=True)
class Unparseable:
    raw: str
    reason: str


DependencyRule = Union[ShowIf, NoCondition, Unparseable]


def parse_dependency(raw: str | Mapping[str, Any] | None) -> DependencyRule | None:
    """Parse a stored dependency payload into a typed rule."""

    if raw is None:
        return None
    if isinstance(raw, str):
        if not raw.strip():
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning(
                "Ignoring unparseable field dependency", extra={"error": str(exc)}
            )
            return Unparseable(raw=raw, reason=str(exc))
    else:
        data = raw

    if not isinstance(data, Mapping):
        logger.warning("Field dependency is not an object; ignoring it")
        return Unparseable(raw=str(raw), reason="dependency payload must be an object")

    clause = data.get("showIf")
    if clause is None:
        return NoCondition()
    if not isinstance(clause, Mapping) or not isinstance(clause.get("fieldKey"), str):
        logger.warning("Field dependency has a malformed showIf clause; ignoring it")
        return Unparseable(raw=str(raw), reason="showIf requires a fieldKey")

    return ShowIf(
        field_key=clause["fieldKey"],
        operator=str(clause.get("operator", "")),
        value=clause.get("value"),
    )


def references_key(rule: DependencyRule | None, field_key: str) -> bool:
    """Return whether the rule's condition points at ``field_key``."""

    return isinstance(rule, ShowIf) and rule.field_key == field_key


def is_visible(
    rule: DependencyRule | str | Mapping[str, Any] | None,
    sibling_values: Mapping[str, str],
) -> bool:
    """Decide whether a field is visible given its siblings' current values."""

    if not isinstance(rule, (ShowIf, NoCondition, Unparseable)):
        rule = parse_dependency(rule)
    if not isinstance(rule, ShowIf):
        return True

    present = rule.field_key in sibling_values and sibling_values[rule.field_key] is not None
    actual = sibling_values[rule.field_key] if present else ""
    expected = rule.value

    match rule.operator:
        case "equals":
            return actual == expected
        case "notEquals":
            return actual != expected
        case "contains":
            if not present or expected is None:
                return False
            return str(expected) in actual
        case "notEmpty":
            return actual.strip() != ""
        case "empty":
            return actual.strip() == ""
        case "in":
            return isinstance(expected, list) and actual in expected
    logger.debug("Unknown dependency operator", extra={"operator": rule.operator})
    return True
