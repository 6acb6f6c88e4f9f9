"""
Fast filter step processor.

Only lets records through whose source field passes a single operator
test against the configured criteria. The output schema is always the
input schema; records are kept or dropped whole.
"""

import logging

import pandas as pd

from typing import Any, Callable, Iterable, Iterator, Optional

from fast_filter.core.base_processor import BaseStepProcessor, StepProcessorError
from fast_filter.core.failure_collector import FailureCollector, ValidationResult
from fast_filter.core.operators import get_supported_tokens
from fast_filter.core.predicate import (
    CompiledPredicate,
    Decision,
    InitializationError,
    apply_predicate,
    initialize_predicate,
    validate_config,
)
from fast_filter.core.schema import Schema, StructuredRecord
from fast_filter.core.variable_substitution import VariableSubstitution, VariableSubstitutionError
from fast_filter.config.filter_config import (
    CRITERIA,
    IGNORE_CASE,
    OPERATOR,
    SOURCE_FIELD,
    FilterConfig,
    FilterConfigError,
)


logger = logging.getLogger(__name__)


class FastFilterProcessor(BaseStepProcessor):
    """
    Processor that keeps records passing one operator test on one field.

    Lifecycle:
    - validate(input_schema) / configure(input_schema) at pipeline build time
    - initialize(variables) once, after deferred criteria can be resolved
    - apply(record) / transform(record, emit) per record, or execute(df)
    """

    @classmethod
    def get_minimal_config(cls) -> dict:
        return {
            SOURCE_FIELD: 'test_column',
            OPERATOR: '=',
            CRITERIA: 'test_value',
        }

    def __init__(self, step_config: dict):
        super().__init__(step_config)

        try:
            self.filter_config = FilterConfig.from_dict(step_config)
        except FilterConfigError as e:
            raise StepProcessorError(f"Step '{self.step_name}': {e}")

        self.resolved_config = None
        self._compiled = None

    # --- Pipeline build time -------------------------------------------------

    def validate(self, input_schema: Optional[Schema],
                 collector: Optional[FailureCollector] = None) -> ValidationResult:
        """Collect every configuration problem against the input schema."""
        collector = collector if collector is not None else FailureCollector(self.step_name)
        return validate_config(self.filter_config, input_schema, collector)

    def configure(self, input_schema: Optional[Schema]) -> Optional[Schema]:
        """
        Validate and declare the output schema.

        Returns:
            The output schema, identical to the input schema

        Raises:
            ConfigurationError: Carrying all collected problems
        """
        self.validate(input_schema).raise_if_invalid()
        return self.get_output_schema(input_schema)

    def get_output_schema(self, input_schema: Optional[Schema]) -> Optional[Schema]:
        return input_schema

    # --- Startup -------------------------------------------------------------

    def initialize(self, variables: Optional[dict] = None) -> CompiledPredicate:
        """
        Resolve deferred criteria and build the compiled predicate.

        Variables come from the injected variable_substitution when present,
        otherwise from the given dictionary.

        Raises:
            InitializationError: If criteria cannot be resolved or the predicate cannot be built
        """
        substitution = self.variable_substitution
        if variables is not None:
            substitution = VariableSubstitution(custom_variables=variables)

        try:
            self.resolved_config = self.filter_config.resolve(substitution)
            self._compiled = initialize_predicate(self.resolved_config)
        except VariableSubstitutionError as e:
            error = InitializationError(f"Step '{self.step_name}' could not resolve criteria: {e}")
            self.log_step_error(error)
            raise error from e
        except InitializationError as e:
            self.log_step_error(e)
            raise

        logger.debug(f"Step '{self.step_name}' initialized with operator '{self._compiled.operator.token}'")
        return self._compiled

    @property
    def is_initialized(self) -> bool:
        return self._compiled is not None

    @property
    def compiled_predicate(self) -> Optional[CompiledPredicate]:
        return self._compiled

    # --- Per record ----------------------------------------------------------

    def apply(self, record: StructuredRecord) -> Decision:
        """Decide whether one record passes."""
        if not self.is_initialized:
            raise StepProcessorError(f"Step '{self.step_name}' must be initialized before records are applied")
        return apply_predicate(record, self._compiled, self.resolved_config)

    def transform(self, record: StructuredRecord, emit: Callable[[StructuredRecord], Any]) -> None:
        """Emit the record if it passes."""
        if self.apply(record).passed:
            emit(record)

    def filter_records(self, records: Iterable[StructuredRecord]) -> Iterator[StructuredRecord]:
        """Yield the records that pass, in order."""
        for record in records:
            if self.apply(record).passed:
                yield record

    def execute(self, data: Any, input_schema: Optional[Schema] = None) -> pd.DataFrame:
        """
        Filter a DataFrame, keeping the rows that pass.

        Runs validation and initialization first if they have not happened.

        Args:
            data: Input pandas DataFrame
            input_schema: Declared schema of the rows (inferred from the data if omitted)

        Returns:
            New DataFrame with the passing rows (original index and columns)

        Raises:
            ConfigurationError: If the configuration does not fit the data
            StepProcessorError: If initialization or filtering fails
        """
        self.log_step_start()

        # Guard clause: ensure we have a DataFrame
        if not isinstance(data, pd.DataFrame):
            raise StepProcessorError(f"Filter step '{self.step_name}' requires a pandas DataFrame")

        self.validate_data_not_empty(data)

        if input_schema is None:
            input_schema = Schema.from_dataframe(data)
        if not self.is_initialized:
            self.configure(input_schema)
            self.initialize()

        initial_row_count = len(data)
        try:
            mask = [
                self.apply(StructuredRecord(input_schema, row)).passed
                for row in self._iter_rows(data)
            ]
        except StepProcessorError as e:
            self.log_step_error(e)
            raise

        filtered_data = data[pd.Series(mask, index=data.index, dtype=bool)].copy()

        final_row_count = len(filtered_data)
        removed_count = initial_row_count - final_row_count

        result_info = f"filtered {initial_row_count} → {final_row_count} rows (removed {removed_count})"
        self.log_step_complete(result_info)

        return filtered_data

    @staticmethod
    def _iter_rows(df: pd.DataFrame) -> Iterator[dict]:
        columns = [str(column) for column in df.columns]
        for values in df.itertuples(index=False, name=None):
            yield dict(zip(columns, values))

    # --- Self description ----------------------------------------------------

    def get_capabilities(self) -> dict:
        """Get processor capabilities information."""
        return {
            'description': 'Only allows records through whose source field passes the operator test',
            'supported_operators': get_supported_tokens(),
            'configuration_options': {
                SOURCE_FIELD: 'Field to test (must be a simple type)',
                OPERATOR: 'Operator token, one of the supported operators',
                CRITERIA: 'Value to compare against; may use ${variable} macros',
                IGNORE_CASE: 'Lower-case the field value before comparing (criteria is used as written)',
            },
            'examples': {
                'equality': "Status = 'Active'",
                'prefix': "Product_Code starts with 'CAN'",
                'regex': "Email matches regex '@example\\.com$'",
                'deferred': "Region = '${region}' with region supplied at run time",
            }
        }
