"""
Catalog API — Declarative Input Validation
==========================================

What:  Per-field validation rules evaluated before any handler side effect.
Why:   Each endpoint declares its rules as data; the handler body only runs
       once the whole payload has been accepted.
How:   `validate_payload()` walks the rules in declaration order, collects
       every violation, and raises a single ValidationError carrying the
       ordered list. Nothing is applied when any rule fails.

Optional rules:
    An optional rule is skipped when its key is absent from the payload.
    A key that is present is always checked, including an explicit null,
    so `{"name": null}` on an update is rejected rather than ignored.
"""

import logging
import math
import re
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Sequence

from catalog.exceptions import ValidationError

logger = logging.getLogger(__name__)

# Signed decimal: "12", "-3", "4.50", ".5", "7." (no exponents, no thousands separators)
_NUMERIC_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)$")


# ── Predicates ────────────────────────────────────────────────────────────

def is_not_empty(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def _is_finite(value: Any) -> bool:
    try:
        return math.isfinite(float(value))
    except (OverflowError, ValueError):
        return False


def is_numeric(value: Any) -> bool:
    # bool is an int subclass; true/false are not prices
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return _is_finite(value)
    if not isinstance(value, str) or _NUMERIC_RE.match(value.strip()) is None:
        return False
    # A digit string longer than a float can hold parses to inf
    return _is_finite(value)


def is_uuid(value: Any) -> bool:
    if isinstance(value, uuid.UUID):
        return True
    if not isinstance(value, str):
        return False
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def is_uuid_or_null(value: Any) -> bool:
    return value is None or is_uuid(value)


# ── Rules ─────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class FieldRule:
    """
    One validation rule.

    Attributes:
        field:     Payload key the rule reads (the camelCase wire name)
        check:     Predicate returning True for acceptable values
        message:   Error message reported when the predicate fails
        optional:  Skip the rule when the key is absent
        aliases:   Alternative keys accepted for the same field (snake_case)
    """

    field: str
    check: Callable[[Any], bool]
    message: str
    optional: bool = False
    aliases: Sequence[str] = ()

    def lookup(self, payload: Mapping[str, Any]) -> tuple:
        """Returns (present, value) for the first of field/aliases found in the payload."""
        for key in (self.field, *self.aliases):
            if key in payload:
                return True, payload[key]
        return False, None


def required(field: str, check: Callable[[Any], bool], message: str, *aliases: str) -> FieldRule:
    return FieldRule(field=field, check=check, message=message, aliases=aliases)


def optional(field: str, check: Callable[[Any], bool], message: str, *aliases: str) -> FieldRule:
    return FieldRule(field=field, check=check, message=message, optional=True, aliases=aliases)


def validate_payload(payload: Mapping[str, Any], rules: Sequence[FieldRule]) -> None:
    """
    Evaluate every rule against the payload.

    Raises:
        ValidationError: with `errors` in rule order when any rule fails.
    """
    errors: List[Dict[str, Any]] = []
    for rule in rules:
        present, value = rule.lookup(payload)
        if not present and rule.optional:
            continue
        if not rule.check(value):
            errors.append({"field": rule.field, "message": rule.message, "value": value})

    if errors:
        logger.info(
            "Validation rejected payload: %s",
            ", ".join(error["field"] for error in errors),
        )
        raise ValidationError(
            message="Validation failed: " + "; ".join(error["message"] for error in errors),
            errors=errors,
        )


# ── Rule Sets ─────────────────────────────────────────────────────────────

PRODUCT_CREATE_RULES = (
    required("name", is_not_empty, "Name is required"),
    required("price", is_numeric, "Price must be numeric"),
    optional("categoryId", is_uuid, "Category ID must be a valid UUID", "category_id"),
)

PRODUCT_UPDATE_RULES = (
    optional("name", is_not_empty, "Name cannot be empty"),
    optional("price", is_numeric, "Price must be numeric"),
    # null detaches the product from its category
    optional("categoryId", is_uuid_or_null, "Category ID must be a valid UUID", "category_id"),
)

CATEGORY_CREATE_RULES = (
    required("name", is_not_empty, "Name is required"),
)

CATEGORY_UPDATE_RULES = (
    optional("name", is_not_empty, "Name cannot be empty"),
)
