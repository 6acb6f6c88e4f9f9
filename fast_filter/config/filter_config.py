"""
Configuration for the fast filter stage.

A FilterConfig moves through two phases. As loaded from a recipe it is
"raw": its criteria may still hold ${name} macros to be supplied at run
time. Resolving it against the run's variables yields a new, fully
resolved FilterConfig; the raw one is never modified.
"""

import logging

from dataclasses import dataclass, replace
from typing import Optional

from fast_filter.core.variable_substitution import (
    VariableSubstitution,
    VariableSubstitutionError,
    has_variables,
)


logger = logging.getLogger(__name__)

SOURCE_FIELD = 'sourceField'
OPERATOR = 'operator'
CRITERIA = 'criteria'
IGNORE_CASE = 'ignoreCase'

# Older configurations spell the case flag this way
LEGACY_IGNORE_CASE = 'shouldIgnoreCase'

# Only criteria may be supplied late
MACRO_ENABLED_PROPERTIES = (CRITERIA,)

TRUE_STRINGS = ('true', '1', 'yes', 'on')
FALSE_STRINGS = ('false', '0', 'no', 'off', '')


class FilterConfigError(Exception):
    """Raised when filter configuration values have the wrong shape."""
    pass


def _parse_bool(value, property_name: str) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
    raise FilterConfigError(f"'{property_name}' must be true or false, got: {value!r}")


def _as_optional_string(value, property_name: str) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # YAML turns criteria like 100 into numbers; comparisons are on strings
        return str(value)
    raise FilterConfigError(f"'{property_name}' must be a string, got {type(value).__name__}")


@dataclass(frozen=True)
class FilterConfig:
    """Immutable filter stage configuration."""
    source_field: Optional[str]
    operator: Optional[str]
    criteria: Optional[str]
    ignore_case: bool = False

    @classmethod
    def from_dict(cls, values: dict) -> 'FilterConfig':
        """
        Build a config from a property dictionary.

        Accepts 'shouldIgnoreCase' as an alias of 'ignoreCase'.

        Raises:
            FilterConfigError: If values have the wrong types
        """
        if not isinstance(values, dict):
            raise FilterConfigError("Filter configuration must be a dictionary")

        ignore_case = values.get(IGNORE_CASE, values.get(LEGACY_IGNORE_CASE, False))

        return cls(
            source_field=_as_optional_string(values.get(SOURCE_FIELD), SOURCE_FIELD),
            operator=_as_optional_string(values.get(OPERATOR), OPERATOR),
            criteria=_as_optional_string(values.get(CRITERIA), CRITERIA),
            ignore_case=_parse_bool(ignore_case, IGNORE_CASE)
        )

    def is_deferred(self, config_property: str) -> bool:
        """Check whether a property still holds a macro to be resolved at run time."""
        if config_property not in MACRO_ENABLED_PROPERTIES:
            return False
        return has_variables(getattr(self, _ATTRIBUTE_NAMES[config_property]))

    @property
    def has_deferred_values(self) -> bool:
        return any(self.is_deferred(name) for name in MACRO_ENABLED_PROPERTIES)

    def resolve(self, variable_substitution: VariableSubstitution) -> 'FilterConfig':
        """
        Produce the resolved config with all macros substituted.

        Returns self unchanged when the criteria holds no macros or escapes.

        Raises:
            VariableSubstitutionError: If a macro names an unknown variable
        """
        if self.criteria is None or '${' not in self.criteria:
            return self

        if variable_substitution is None:
            if self.has_deferred_values:
                raise VariableSubstitutionError(
                    f"Criteria '{self.criteria}' uses variables but no variables were supplied"
                )
            # Only $${ escapes to unescape
            variable_substitution = VariableSubstitution()

        resolved = replace(self, criteria=variable_substitution.substitute(self.criteria))
        logger.debug(f"Resolved criteria: '{self.criteria}' → '{resolved.criteria}'")
        return resolved

    def to_dict(self) -> dict:
        return {
            SOURCE_FIELD: self.source_field,
            OPERATOR: self.operator,
            CRITERIA: self.criteria,
            IGNORE_CASE: self.ignore_case,
        }


_ATTRIBUTE_NAMES = {
    SOURCE_FIELD: 'source_field',
    OPERATOR: 'operator',
    CRITERIA: 'criteria',
    IGNORE_CASE: 'ignore_case',
}
