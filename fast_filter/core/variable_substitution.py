"""
Variable substitution for deferred filter configuration values.

fast_filter/core/variable_substitution.py

A configuration value may contain ${name} macros whose values are only known
shortly before execution (recipe variables, --var overrides, the run date).
The dollar-brace syntax keeps regex quantifiers such as 'a{2}' in criteria
from being mistaken for variables.
"""

import re
import logging

from datetime import datetime
from typing import Any


logger = logging.getLogger(__name__)


class VariableSubstitutionError(Exception):
    """Raised when variable substitution fails."""
    pass


# Either an escape ($${, group 1 unset) or a ${name} macro (group 1 is the name).
# One left-to-right scan, so substituted values are never rescanned.
MACRO_PATTERN = re.compile(r'\$\$\{|\$\{(\w+)\}')


class VariableSubstitution:
    """
    Resolves ${name} macros from custom variables and built-in date/time values.
    """

    # Built-in date/time variables
    DATE_TIME_FORMATS = {
        'year': '%Y',
        'month': '%m',
        'day': '%d',
        'date': '%Y%m%d',
        'time': '%H%M%S',
        'timestamp': '%Y%m%d_%H%M%S',
        'YYYY_MM_DD': '%Y_%m_%d',
    }

    def __init__(self, custom_variables=None, now=None):
        """
        Initialize variable substitution.

        Args:
            custom_variables: Dictionary of custom variables (any type, used as strings)
            now: Reference time for date/time variables (defaults to current time)
        """
        self.custom_variables = dict(custom_variables or {})
        self.now = now or datetime.now()

        logger.debug(f"Initialized VariableSubstitution with {len(self.custom_variables)} custom variables")

    def substitute(self, template: str) -> str:
        """
        Substitute ${name} macros in a template string.

        Args:
            template: String that may contain macros

        Returns:
            String with macros replaced and $${ escapes unescaped

        Raises:
            VariableSubstitutionError: If a macro names an unknown variable
        """
        if not isinstance(template, str):
            return template

        if '${' not in template:
            return template

        variables = self._build_variable_dict()

        def replace_macro(match):
            name = match.group(1)
            if name is None:
                return '${'
            if name not in variables:
                raise VariableSubstitutionError(
                    f"Unknown variable '{name}' in '{template}'. "
                    f"Available variables: {sorted(variables)}"
                )
            return str(variables[name])

        result = MACRO_PATTERN.sub(replace_macro, template)

        logger.debug(f"Variable substitution: '{template}' → '{result}'")
        return result

    def validate_template(self, template: str) -> list:
        """
        Get the macro names in a template that have no value.

        Returns:
            List of unknown variable names (empty if all are known)
        """
        available = self._build_variable_dict()
        return [name for name in find_variables(template) if name not in available]

    def add_custom_variable(self, name: str, value: Any) -> None:
        """Add or update a custom variable."""
        if not isinstance(name, str) or not name.strip():
            raise VariableSubstitutionError("Variable name must be a non-empty string")

        self.custom_variables[name] = value
        logger.debug(f"Added custom variable: {name} = {value} (type: {type(value).__name__})")

    def remove_custom_variable(self, name: str) -> None:
        if name in self.custom_variables:
            del self.custom_variables[name]
            logger.debug(f"Removed custom variable: {name}")

    def get_available_variables(self) -> dict:
        """Get all variables and their current values."""
        return self._build_variable_dict()

    def _build_variable_dict(self) -> dict:
        variables = {
            name: self.now.strftime(strftime_code)
            for name, strftime_code in self.DATE_TIME_FORMATS.items()
        }
        # Custom variables override built-ins
        variables.update(self.custom_variables)
        return variables


# =============================================================================
# MODULE-LEVEL CONVENIENCE FUNCTIONS
# =============================================================================

def has_variables(text: Any) -> bool:
    """Check whether a value is a string containing at least one ${name} macro."""
    return len(find_variables(text)) > 0


def find_variables(text: Any) -> list:
    """Get the macro names in a string, in order of first appearance."""
    if not isinstance(text, str):
        return []
    names = []
    for match in MACRO_PATTERN.finditer(text):
        name = match.group(1)
        if name is not None and name not in names:
            names.append(name)
    return names


def substitute_variables(template: str, custom_variables=None) -> str:
    """One-off substitution of ${name} macros."""
    return VariableSubstitution(custom_variables).substitute(template)


def parse_cli_variables(variable_args: list) -> dict:
    """
    Parse CLI variable arguments in the format 'name=value'.

    Args:
        variable_args: List of strings in format 'name=value'

    Returns:
        Dictionary of parsed variables

    Raises:
        VariableSubstitutionError: If parsing fails
    """
    if not variable_args:
        return {}

    variables = {}

    for var_arg in variable_args:
        if '=' not in var_arg:
            raise VariableSubstitutionError(
                f"Invalid variable format: '{var_arg}'. Expected format: name=value"
            )

        name, value = var_arg.split('=', 1)  # Split only on first =
        name = name.strip()

        if not name:
            raise VariableSubstitutionError(f"Variable name cannot be empty in: '{var_arg}'")

        # Values are kept verbatim; criteria whitespace is significant
        variables[name] = value
        logger.debug(f"Parsed CLI variable: {name} = {value}")

    return variables
