"""Ordered validation rules applied to candidate field values.

``validation_rules`` is stored as a JSON list such as::

    [{"type": "minLength", "value": 5, "errorMessageEn": "Too short"},
     {"type": "regex", "value": "^[0-9]+$"}]

Rules run in order and the first failure wins. Malformed payloads disable
validation for the field instead of raising.
"""
from __future__ import annotations

import json
import logging
import math
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Annotated, Any, Literal, Union
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
PHONE_PATTERN = re.compile(r"[0-9\s\-+()]+")
PHONE_MIN_LENGTH = 10
URL_SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")
FLOAT_PREFIX_PATTERN = re.compile(
    r"^[+-]?(?:Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)"
)


class _RuleBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    error_message_en: str | None = Field(default=None, alias="errorMessageEn")
    error_message_ar: str | None = Field(default=None, alias="errorMessageAr")

    def message(self, language: str) -> str:
        if language == "ar" and self.error_message_ar:
            return self.error_message_ar
        if self.error_message_en:
            return self.error_message_en
        return self.default_message()

    def default_message(self) -> str:  # pragma: no cover - overridden
        raise NotImplementedError


class LengthRule(_RuleBase):
    type: Literal["minLength", "maxLength"]
    value: float | None = None

    @property
    def limit(self) -> float:
        return self.value or 0

    def default_message(self) -> str:
        if self.type == "minLength":
            return f"Minimum length is {_format_number(self.limit)} characters"
        return f"Maximum length is {_format_number(self.limit)} characters"


class RangeRule(_RuleBase):
    type: Literal["minValue", "maxValue"]
    value: float | None = None

    @property
    def limit(self) -> float:
        return self.value or 0

    def default_message(self) -> str:
        if self.type == "minValue":
            return f"Minimum value is {_format_number(self.limit)}"
        return f"Maximum value is {_format_number(self.limit)}"


class RegexRule(_RuleBase):
    type: Literal["regex"]
    value: str = ""

    def default_message(self) -> str:
        return "Value does not match required pattern"


class FormatRule(_RuleBase):
    type: Literal["email", "url", "phone"]

    def default_message(self) -> str:
        if self.type == "email":
            return "Invalid email address"
        if self.type == "url":
            return "Invalid URL"
        return "Invalid phone number"


ValidationRule = Annotated[
    Union[LengthRule, RangeRule, RegexRule, FormatRule],
    Field(discriminator="type"),
]

_rule_adapter: TypeAdapter[Any] = TypeAdapter(ValidationRule)


@dataclass(frozen=True)
class Unparseable:
    raw: str
    reason: str


ParsedRules = Union[list[Any], Unparseable]


def parse_validation_rules(raw: str | Sequence[Any] | None) -> ParsedRules | None:
    """Parse a stored rule list, skipping individual rules that are malformed."""

    if raw is None:
        return None
    if isinstance(raw, str):
        if not raw.strip():
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning(
                "Ignoring unparseable validation rules", extra={"error": str(exc)}
            )
            return Unparseable(raw=raw, reason=str(exc))
    else:
        data = raw

    if not isinstance(data, list):
        logger.warning("Validation rules payload is not a list; ignoring it")
        return Unparseable(raw=str(raw), reason="validation rules must be a list")

    rules: list[Any] = []
    for index, item in enumerate(data):
        try:
            rules.append(_rule_adapter.validate_python(item))
        except ValidationError as exc:
            logger.warning(
                "Skipping malformed validation rule",
                extra={"rule_index": index, "error": exc.errors(include_url=False)},
            )
    return rules


def validate(
    rules: ParsedRules | str | Sequence[Any] | None,
    value: str | None,
    language: str = "en",
) -> str | None:
    """Return the message of the first failing rule, or ``None``."""

    if value is None or not value.strip():
        return None
    if not _is_parsed(rules):
        rules = parse_validation_rules(rules)
    if rules is None or isinstance(rules, Unparseable):
        return None

    for rule in rules:
        if _rule_fails(rule, value):
            return rule.message(language)
    return None


def _is_parsed(rules: Any) -> bool:
    if isinstance(rules, Unparseable):
        return True
    return isinstance(rules, list) and all(isinstance(rule, _RuleBase) for rule in rules)


def _rule_fails(rule: Any, value: str) -> bool:
    match rule:
        case LengthRule(type="minLength"):
            return len(value) < rule.limit
        case LengthRule(type="maxLength"):
            return len(value) > rule.limit
        case RangeRule(type="minValue"):
            # NaN comparisons are always false, so non-numeric input never fails.
            return parse_float(value) < rule.limit
        case RangeRule(type="maxValue"):
            return parse_float(value) > rule.limit
        case RegexRule():
            try:
                pattern = re.compile(rule.value)
            except re.error as exc:
                logger.warning(
                    "Skipping validation rule with invalid pattern",
                    extra={"pattern": rule.value, "error": str(exc)},
                )
                return False
            return pattern.search(value) is None
        case FormatRule(type="email"):
            return EMAIL_PATTERN.fullmatch(value) is None
        case FormatRule(type="url"):
            return not is_absolute_url(value)
        case FormatRule(type="phone"):
            return PHONE_PATTERN.fullmatch(value) is None or len(value) < PHONE_MIN_LENGTH
    return False


def parse_float(value: str) -> float:
    """Parse the leading number of ``value`` the way browsers' parseFloat does."""

    match = FLOAT_PREFIX_PATTERN.match(value.strip())
    if match is None:
        return math.nan
    return float(match.group(0).replace("Infinity", "inf"))


def is_absolute_url(value: str) -> bool:
    candidate = value.strip()
    try:
        parts = urlsplit(candidate)
    except ValueError:
        return False
    if not parts.scheme or not URL_SCHEME_PATTERN.match(parts.scheme):
        return False
    if parts.scheme.lower() in {"http", "https", "ftp", "ws", "wss"}:
        return bool(parts.hostname)
    return bool(parts.netloc or parts.path)


def _format_number(number: float) -> str:
    if math.isfinite(number) and number == int(number):
        return str(int(number))
    return str(number)
