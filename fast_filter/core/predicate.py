"""
Predicate evaluation for the fast filter stage.

Three phases, each with its own failure mode:

- validate_config: run once when the pipeline is built. Collects every
  configuration problem, tagged by property, and never raises for them.
- initialize_predicate: run once before records flow, on the resolved
  config. Resolves the operator and compiles the regex; any problem here
  is fatal (InitializationError).
- apply_predicate: run once per record. A missing value is a plain Drop;
  a non-simple field type is a contract violation (EvaluationError).
"""

import re
import logging

import pandas as pd

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from fast_filter.core.base_processor import StepProcessorError
from fast_filter.core.failure_collector import FailureCollector, ValidationResult
from fast_filter.core.operators import Operator, OperatorError, UnknownOperatorError, evaluate, resolve
from fast_filter.core.schema import Schema, StructuredRecord
from fast_filter.core.variable_substitution import find_variables
from fast_filter.config.filter_config import CRITERIA, OPERATOR, SOURCE_FIELD, FilterConfig


logger = logging.getLogger(__name__)


class InitializationError(StepProcessorError):
    """Raised when a resolved configuration cannot be turned into a predicate."""
    pass


class EvaluationError(StepProcessorError):
    """Raised when a record cannot be evaluated; validation should have prevented it."""
    pass


class Decision(Enum):
    """Per-record outcome."""
    PASS = 'pass'
    DROP = 'drop'

    @property
    def passed(self) -> bool:
        return self is Decision.PASS


@dataclass(frozen=True)
class CompiledPredicate:
    """Operator resolved once, plus the compiled pattern for regex operators."""
    operator: Operator
    pattern: Optional[re.Pattern] = None

    def test(self, value: str, criteria: str) -> bool:
        return evaluate(self.operator, value, criteria, self.pattern)


def validate_config(config: FilterConfig, input_schema: Optional[Schema],
                    collector: Optional[FailureCollector] = None) -> ValidationResult:
    """
    Check a (possibly raw) filter configuration against the input schema.

    Every problem is added to the collector; nothing is raised for
    configuration mistakes. Criteria checks are skipped while the criteria
    is deferred. Field checks are skipped when no input schema is known.

    Args:
        config: Filter configuration to check
        input_schema: Schema of incoming records, or None if not yet known
        collector: Collector to add failures to (a new one if omitted)

    Returns:
        ValidationResult with all collected failures
    """
    collector = collector if collector is not None else FailureCollector()

    source_field = config.source_field
    if not source_field:
        collector.add_failure("Source field must be specified.", SOURCE_FIELD)
    elif input_schema is not None:
        field_schema = input_schema.get_field(source_field)
        if field_schema is None:
            collector.add_failure(
                f"Field '{source_field}' not found in input schema",
                SOURCE_FIELD,
                f"Available fields: {input_schema.field_names}"
            )
        elif not field_schema.is_simple_or_nullable_simple():
            collector.add_failure(
                f"Input field must be a simple type but was type: {field_schema.type_name}",
                SOURCE_FIELD
            )

    criteria_deferred = config.is_deferred(CRITERIA)
    if not criteria_deferred and not config.criteria:
        collector.add_failure("Criteria must be specified.", CRITERIA)

    if not config.operator:
        collector.add_failure("Operator must be specified.", OPERATOR)
    else:
        operator = None
        try:
            operator = resolve(config.operator)
        except UnknownOperatorError as e:
            collector.add_failure(str(e), OPERATOR)

        if operator is not None and operator.is_regex and config.criteria and not criteria_deferred:
            try:
                re.compile(config.criteria)
            except re.error as e:
                collector.add_failure(f"Invalid criteria: {e}", CRITERIA)

    if criteria_deferred:
        logger.debug(
            f"Criteria depends on variables {find_variables(config.criteria)}; "
            f"criteria checks deferred to initialization"
        )

    result = collector.get_result()
    if result.valid:
        logger.debug(f"Filter configuration is valid: {config.to_dict()}")
    else:
        logger.debug(f"Filter configuration has {len(result.failures)} problem(s)")
    return result


def initialize_predicate(config: FilterConfig) -> CompiledPredicate:
    """
    Build the compiled predicate from a resolved configuration.

    Raises:
        InitializationError: If criteria is still deferred or missing,
            the operator is unknown, or the regex does not compile
    """
    if config.is_deferred(CRITERIA):
        raise InitializationError(
            f"Criteria '{config.criteria}' still contains unresolved variables: "
            f"{find_variables(config.criteria)}"
        )

    if config.criteria is None:
        raise InitializationError("Criteria must be specified.")

    try:
        operator = resolve(config.operator)
    except UnknownOperatorError as e:
        raise InitializationError(str(e)) from e

    pattern = None
    if operator.is_regex:
        try:
            pattern = re.compile(config.criteria)
        except re.error as e:
            raise InitializationError(f"Invalid criteria '{config.criteria}': {e}") from e

    logger.debug(f"Initialized predicate: {config.source_field} {operator.token} '{config.criteria}'")
    return CompiledPredicate(operator=operator, pattern=pattern)


def is_missing(value: Any) -> bool:
    """Check for an absent value: None or a scalar NA (NaN, NaT, pd.NA)."""
    if value is None:
        return True
    return bool(pd.api.types.is_scalar(value) and pd.isna(value))


def normalize_value(value: Any, ignore_case: bool) -> str:
    """
    String form of a field value as compared by the operators.

    Trimmed, and lower-cased when ignore_case is set. Booleans render as
    'true'/'false' (numpy booleans included) and bytes are decoded as UTF-8.

    Other values use str(), so floats keep their Python form: an integer
    column that pandas read as float because of blank cells compares as
    '5.0', not '5'.
    """
    if pd.api.types.is_bool(value):
        text = 'true' if value else 'false'
    elif isinstance(value, (bytes, bytearray)):
        text = bytes(value).decode('utf-8', errors='replace')
    else:
        text = str(value)

    text = text.strip()
    if ignore_case:
        text = text.lower()
    return text


def apply_predicate(record: StructuredRecord, compiled: CompiledPredicate,
                    config: FilterConfig) -> Decision:
    """
    Decide whether one record passes the filter.

    The criteria is compared verbatim: it is never trimmed or case-folded,
    even when ignore_case is set.

    Raises:
        EvaluationError: If the predicate is not initialized, or the source
            field is undeclared or not a simple type
    """
    if compiled is None:
        raise EvaluationError("Filter predicate has not been initialized")

    source_field = config.source_field
    value = record.get(source_field)
    if is_missing(value):
        return Decision.DROP

    field_schema = record.schema.get_field(source_field)
    if field_schema is None:
        raise EvaluationError(f"Field '{source_field}' is not declared in the record schema")
    if not field_schema.is_simple_or_nullable_simple():
        raise EvaluationError(
            f"Input field must be a simple type but was type: {field_schema.type_name}"
        )

    normalized = normalize_value(value, config.ignore_case)

    try:
        passed = compiled.test(normalized, config.criteria)
    except OperatorError as e:
        raise EvaluationError(f"Could not evaluate field '{source_field}': {e}") from e

    return Decision.PASS if passed else Decision.DROP
