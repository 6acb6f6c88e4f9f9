"""
Operator catalog for the fast filter stage.

Maps the human-readable operator tokens used in filter configuration
(e.g. 'starts with', '>=') to their comparison semantics. All comparisons
work on strings: ordering is plain lexicographic string ordering, never
numeric, and the regex operators use search ("find anywhere") semantics
with a pattern compiled by the caller.
"""

import re
import logging

from enum import Enum
from types import MappingProxyType
from typing import Optional


logger = logging.getLogger(__name__)


class OperatorError(Exception):
    """Raised when an operator cannot be resolved or evaluated."""
    pass


class UnknownOperatorError(OperatorError, ValueError):
    """Raised when a token does not name any supported operator."""

    def __init__(self, token):
        self.token = token
        super().__init__(f"Unknown operator type for token: {token}")


class OperatorKind(Enum):
    """Comparison family an operator belongs to."""
    EQUALITY = 'equality'
    ORDERING = 'ordering'
    CONTAINMENT = 'containment'
    PREFIX = 'prefix'
    SUFFIX = 'suffix'
    REGEX = 'regex'


class Operator(Enum):
    """
    Closed set of supported filter operators.

    Each member carries its configuration token, its comparison kind and
    whether it is the negated form of that kind.
    """

    EQUAL = ('=', OperatorKind.EQUALITY, False)
    NOT_EQUAL = ('!=', OperatorKind.EQUALITY, True)
    GREATER = ('>', OperatorKind.ORDERING, False)
    GREATER_OR_EQUAL = ('>=', OperatorKind.ORDERING, False)
    LESS = ('<', OperatorKind.ORDERING, False)
    LESS_OR_EQUAL = ('<=', OperatorKind.ORDERING, False)
    CONTAINS = ('contains', OperatorKind.CONTAINMENT, False)
    NOT_CONTAINS = ('does not contain', OperatorKind.CONTAINMENT, True)
    STARTS_WITH = ('starts with', OperatorKind.PREFIX, False)
    ENDS_WITH = ('ends with', OperatorKind.SUFFIX, False)
    NOT_STARTS_WITH = ('does not start with', OperatorKind.PREFIX, True)
    NOT_ENDS_WITH = ('does not end with', OperatorKind.SUFFIX, True)
    MATCH_REGEXP = ('matches regex', OperatorKind.REGEX, False)
    NOT_MATCH_REGEXP = ('does not match regex', OperatorKind.REGEX, True)

    def __init__(self, token: str, kind: OperatorKind, negated: bool):
        self.token = token
        self.kind = kind
        self.negated = negated

    @property
    def is_regex(self) -> bool:
        return self.kind is OperatorKind.REGEX

    @property
    def complement(self) -> Optional['Operator']:
        """The explicit "not" partner of this operator, or None for ordering operators."""
        if self.kind is OperatorKind.ORDERING:
            return None
        for candidate in Operator:
            if candidate.kind is self.kind and candidate.negated != self.negated:
                return candidate
        return None

    def __str__(self) -> str:
        return self.token


# Read-only token table, built once at import
OPERATORS_BY_TOKEN = MappingProxyType({operator.token: operator for operator in Operator})


def resolve(token: str) -> Operator:
    """
    Resolve a configuration token to its operator.

    Matching is exact and case-sensitive.

    Raises:
        UnknownOperatorError: If the token is not in the catalog
    """
    operator = OPERATORS_BY_TOKEN.get(token) if isinstance(token, str) else None
    if operator is None:
        raise UnknownOperatorError(token)
    return operator


def get_supported_tokens() -> list:
    """Get the operator tokens in catalog order."""
    return [operator.token for operator in Operator]


def _compare(value: str, criteria: str, kind: OperatorKind, pattern) -> bool:
    """Evaluate the positive form of a comparison kind."""
    if kind is OperatorKind.EQUALITY:
        return value == criteria
    if kind is OperatorKind.CONTAINMENT:
        return criteria in value
    if kind is OperatorKind.PREFIX:
        return value.startswith(criteria)
    if kind is OperatorKind.SUFFIX:
        return value.endswith(criteria)
    if kind is OperatorKind.REGEX:
        return pattern.search(value) is not None
    raise OperatorError(f"No comparison defined for operator kind: {kind.value}")


_ORDERING_TESTS = MappingProxyType({
    Operator.GREATER: lambda value, criteria: value > criteria,
    Operator.GREATER_OR_EQUAL: lambda value, criteria: value >= criteria,
    Operator.LESS: lambda value, criteria: value < criteria,
    Operator.LESS_OR_EQUAL: lambda value, criteria: value <= criteria,
})


def evaluate(operator: Operator, value: str, criteria: str,
             pattern: Optional[re.Pattern] = None) -> bool:
    """
    Apply an operator to an already-normalized value.

    Args:
        operator: Operator to apply
        value: Normalized field value
        criteria: Configured criteria, compared verbatim
        pattern: Compiled pattern, required for the regex operators

    Returns:
        True if the value satisfies the operator

    Raises:
        OperatorError: If a regex operator is evaluated without a pattern
    """
    if not isinstance(operator, Operator):
        raise OperatorError(f"Expected an Operator, got {type(operator).__name__}")

    if operator.kind is OperatorKind.ORDERING:
        return _ORDERING_TESTS[operator](value, criteria)

    if operator.is_regex and pattern is None:
        raise OperatorError(f"Operator '{operator.token}' requires a compiled pattern")

    result = _compare(value, criteria, operator.kind, pattern)
    return not result if operator.negated else result
