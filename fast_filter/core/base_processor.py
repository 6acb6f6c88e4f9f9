"""
Base step processor for fast filter pipelines.

A step is built from a plain dictionary naming its processor type and,
optionally, a human-readable description used in log lines and errors.
The registry maps processor type names to the classes that build them.
"""

import logging

from abc import ABC, abstractmethod
from typing import Any


logger = logging.getLogger(__name__)

step_desc = 'step_description'
proc_type = 'processor_type'


class StepProcessorError(Exception):
    """Raised when a step cannot be built or fails while running."""
    pass


class BaseStepProcessor(ABC):
    """
    Common ground for pipeline steps.

    Subclasses implement execute(); the host may inject a
    variable_substitution before the step is initialized.
    """

    def __init__(self, step_config: dict):
        # Guard clauses: a dict with a usable type and, if given, a string description
        if not isinstance(step_config, dict):
            raise StepProcessorError("Step configuration must be a dictionary")

        step_type = step_config.get(proc_type)
        if step_type is None:
            raise StepProcessorError(f"Step configuration missing required '{proc_type}' field")
        if not isinstance(step_type, str) or not step_type.strip():
            raise StepProcessorError(f"Step {proc_type} must be a non-empty string")

        step_name = step_config.get(step_desc, f'Unnamed {step_type} step')
        if not isinstance(step_name, str):
            raise StepProcessorError(f"Step '{step_desc}' must be a string, got {type(step_name).__name__}")

        self.step_config = step_config
        self.step_type = step_type
        self.step_name = step_name
        self.variable_substitution = None

        logger.debug(f"Built {self.__class__.__name__} for step: {self.step_name}")

    @abstractmethod
    def execute(self, data: Any) -> Any:
        """
        Run the step over a batch of data.

        Raises:
            StepProcessorError: If the step cannot run
        """

    def validate_data_not_empty(self, data: Any) -> None:
        """
        Reject missing input. An empty DataFrame is valid and filters to an empty result.

        Raises:
            StepProcessorError: If data is None
        """
        if data is None:
            raise StepProcessorError(f"Step '{self.step_name}' received None data")

    def log_step_start(self) -> None:
        logger.info(f"Starting step: '{self.step_name}' ({self.step_type})")

    def log_step_complete(self, result_info: str = "") -> None:
        logger.info(f"Completed step: '{self.step_name}'")
        if result_info:
            logger.info(f" - {result_info}")

    def log_step_error(self, error: Exception) -> None:
        logger.error(f"Error in step '{self.step_name}': {error}")

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.step_name}', {proc_type}='{self.step_type}')"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(step_config={self.step_config})"


class StepProcessorRegistry:
    """Maps processor type names from recipes to step processor classes."""

    def __init__(self):
        self._processors = {}

    def register(self, step_type: str, processor_class: type) -> None:
        """
        Raises:
            StepProcessorError: If the name is blank or the class is not a step processor
        """
        if not isinstance(step_type, str) or not step_type.strip():
            raise StepProcessorError("Step type must be a non-empty string")

        if not (isinstance(processor_class, type) and issubclass(processor_class, BaseStepProcessor)):
            class_name = getattr(processor_class, '__name__', repr(processor_class))
            raise StepProcessorError(f"Processor class {class_name} must inherit from BaseStepProcessor")

        self._processors[step_type] = processor_class
        logger.debug(f"Registered processor for step type: {step_type}")

    def get_processor_class(self, step_type: str) -> type:
        """
        Raises:
            StepProcessorError: If no class is registered under step_type
        """
        processor_class = self._processors.get(step_type) if isinstance(step_type, str) else None
        if processor_class is None:
            available = ', '.join(self._processors) or 'none'
            raise StepProcessorError(f"Unknown step type: {step_type}. Available types: {available}")
        return processor_class

    def create_processor(self, step_config: dict) -> BaseStepProcessor:
        """
        Build the processor a step configuration asks for.

        Raises:
            StepProcessorError: If the type is unknown or the processor rejects its config
        """
        if not isinstance(step_config, dict):
            raise StepProcessorError("Step configuration must be a dictionary")

        step_type = step_config.get(proc_type)
        processor_class = self.get_processor_class(step_type)

        try:
            return processor_class(step_config)
        except StepProcessorError:
            raise
        except Exception as e:
            raise StepProcessorError(f"Failed to create processor for step type '{step_type}': {e}") from e

    def get_registered_types(self) -> list:
        return list(self._processors)


# Global registry instance
registry = StepProcessorRegistry()
