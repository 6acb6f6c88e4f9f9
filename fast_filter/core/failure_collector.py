"""
Validation failure collection for the fast filter stage.

Configuration problems are gathered rather than raised one at a time, so a
user sees every mistake in a single pass. Each failure is tagged with the
configuration property it concerns.
"""

import logging

from dataclasses import dataclass
from typing import Optional


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationFailure:
    """One configuration problem."""
    message: str
    config_property: Optional[str] = None
    corrective_action: Optional[str] = None

    def __str__(self) -> str:
        text = self.message
        if self.config_property:
            text = f"[{self.config_property}] {text}"
        if self.corrective_action:
            text += f" ({self.corrective_action})"
        return text


class ConfigurationError(Exception):
    """Raised when validation found one or more configuration problems."""

    def __init__(self, failures):
        self.failures = list(failures)
        if len(self.failures) == 1:
            message = f"Invalid filter configuration: {self.failures[0]}"
        else:
            message = f"Invalid filter configuration ({len(self.failures)} problems):\n"
            message += "\n".join(f"  • {failure}" for failure in self.failures)
        super().__init__(message)

    def get_failures_for(self, config_property: str) -> list:
        return [failure for failure in self.failures if failure.config_property == config_property]


class ValidationResult:
    """Outcome of a validation pass: zero or more failures."""

    def __init__(self, failures=None):
        self.failures = tuple(failures or ())

    @property
    def valid(self) -> bool:
        return len(self.failures) == 0

    def __bool__(self) -> bool:
        return self.valid

    def get_failures_for(self, config_property: str) -> list:
        """Get the failures attributed to one configuration property."""
        return [failure for failure in self.failures if failure.config_property == config_property]

    @property
    def failed_properties(self) -> set:
        return {failure.config_property for failure in self.failures if failure.config_property}

    def raise_if_invalid(self) -> None:
        """
        Raises:
            ConfigurationError: If any failures were collected
        """
        if not self.valid:
            raise ConfigurationError(self.failures)

    def __repr__(self) -> str:
        return f"ValidationResult(valid={self.valid}, failures={list(self.failures)!r})"


class FailureCollector:
    """Accumulates validation failures until the caller asks for the result."""

    def __init__(self, stage_name: str = 'fast_filter'):
        self.stage_name = stage_name
        self._failures = []

    def add_failure(self, message: str, config_property: Optional[str] = None,
                    corrective_action: Optional[str] = None) -> ValidationFailure:
        failure = ValidationFailure(message, config_property, corrective_action)
        self._failures.append(failure)
        logger.debug(f"Validation failure in '{self.stage_name}': {failure}")
        return failure

    @property
    def failures(self) -> list:
        return list(self._failures)

    def has_failures(self) -> bool:
        return len(self._failures) > 0

    def get_result(self) -> ValidationResult:
        return ValidationResult(self._failures)

    def get_or_raise(self) -> ValidationResult:
        """
        Get the result, raising if any failures were collected.

        Raises:
            ConfigurationError: If any failures were collected
        """
        result = self.get_result()
        result.raise_if_invalid()
        return result
