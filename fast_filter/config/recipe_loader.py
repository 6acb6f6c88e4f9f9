"""
Recipe configuration loader for fast filter recipes.

This module handles loading and validation of YAML/JSON recipe files,
with friendly error reporting and structure validation.

A recipe looks like:

    settings:
      description: 'Keep active customers in one region'
      variables:
        region: 'west'
    filter:
      sourceField: Region
      operator: '='
      criteria: '${region}'
      ignoreCase: true
    schema:            # optional, otherwise inferred from the data
      Region: 'string?'
"""

import json
import yaml
import logging

from pathlib import Path
from typing import Optional

from fast_filter.core.base_processor import proc_type, step_desc
from fast_filter.core.schema import Schema, SchemaError
from fast_filter.config.filter_config import CRITERIA, IGNORE_CASE, LEGACY_IGNORE_CASE, OPERATOR, SOURCE_FIELD


logger = logging.getLogger(__name__)

KNOWN_SECTIONS = ('settings', 'filter', 'schema')
FILTER_PROPERTIES = (SOURCE_FIELD, OPERATOR, CRITERIA, IGNORE_CASE, LEGACY_IGNORE_CASE, step_desc, proc_type)


class RecipeValidationError(Exception):
    """Raised when a recipe file has invalid structure or content."""
    pass


class RecipeLoader:
    """
    Loads and validates fast filter recipe files.

    Supports both YAML and JSON formats with friendly error reporting
    and structure validation.
    """

    def __init__(self):
        """Initialize the recipe loader."""
        self.recipe_data = None
        self.recipe_path = None

    def load_recipe_file(self, recipe_path) -> dict:
        """
        Load a recipe file from disk with validation.

        Args:
            recipe_path: Path to the recipe file (.yaml, .yml, or .json)

        Returns:
            Loaded and validated recipe data

        Raises:
            FileNotFoundError: If the recipe file does not exist
            RecipeValidationError: If the recipe format is invalid or has errors
        """
        # Guard clause: ensure we have a valid path
        if not recipe_path:
            raise RecipeValidationError("Recipe path cannot be empty")

        self.recipe_path = Path(recipe_path)

        if not self.recipe_path.exists():
            raise FileNotFoundError(f"Recipe file not found: {self.recipe_path}")

        logger.info(f"Loading recipe from: {self.recipe_path}")

        suffix = self.recipe_path.suffix.lower()
        if suffix in ['.yaml', '.yml']:
            format_type = 'yaml'
        elif suffix == '.json':
            format_type = 'json'
        else:
            raise RecipeValidationError(
                f"Unsupported file format: {self.recipe_path.suffix}. "
                f"Supported formats: .yaml, .yml, .json"
            )

        try:
            with open(self.recipe_path, 'r', encoding='utf-8') as f:
                recipe_text = f.read()
        except OSError as e:
            raise RecipeValidationError(f"Error reading recipe file: {e}")

        return self.load_string(recipe_text, format_type)

    def load_string(self, recipe_string: str, format_type: str = 'yaml') -> dict:
        """
        Load a recipe from a string with validation.

        Args:
            recipe_string: Recipe text
            format_type: 'yaml' or 'json'

        Returns:
            Loaded and validated recipe data

        Raises:
            RecipeValidationError: If the recipe is invalid
        """
        source = self.recipe_path or '<string>'
        try:
            if format_type == 'yaml':
                self.recipe_data = yaml.safe_load(recipe_string)
            elif format_type == 'json':
                self.recipe_data = json.loads(recipe_string)
            else:
                raise RecipeValidationError(f"Unsupported format type: {format_type}")
        except yaml.YAMLError as e:
            raise RecipeValidationError(f"YAML syntax error in {source}: {e}")
        except json.JSONDecodeError as e:
            raise RecipeValidationError(f"JSON syntax error in {source}: {e}")

        # Guard clause: ensure we got valid data
        if not self.recipe_data:
            raise RecipeValidationError("Recipe file is empty or contains no data")

        validation_result = self.validate_recipe_structure()
        if not validation_result['valid']:
            error_msg = "Recipe structure validation failed:\n"
            for error in validation_result['errors']:
                error_msg += f"  • {error}\n"
            raise RecipeValidationError(error_msg.strip())

        # Log warnings (non-fatal issues)
        for warning in validation_result.get('warnings', []):
            logger.warning(f"⚠️  {warning}")

        return self.recipe_data

    def validate_recipe_structure(self) -> dict:
        """
        Validate the overall structure of the recipe.

        Returns:
            Dictionary with validation results: {'valid': bool, 'errors': list, 'warnings': list}
        """
        errors = []
        warnings = []

        if not isinstance(self.recipe_data, dict):
            errors.append("Recipe must be a mapping with 'settings' and 'filter' sections")
            return {'valid': False, 'errors': errors, 'warnings': warnings}

        for section in self.recipe_data:
            if section not in KNOWN_SECTIONS:
                warnings.append(f"Unknown section '{section}' will be ignored")

        settings_validation = self._validate_settings_section()
        errors.extend(settings_validation['errors'])
        warnings.extend(settings_validation['warnings'])

        filter_validation = self._validate_filter_section()
        errors.extend(filter_validation['errors'])
        warnings.extend(filter_validation['warnings'])

        if 'schema' in self.recipe_data:
            try:
                Schema.from_dict(self.recipe_data['schema'])
            except SchemaError as e:
                errors.append(f"Invalid 'schema' section: {e}")

        return {'valid': len(errors) == 0, 'errors': errors, 'warnings': warnings}

    def _validate_settings_section(self) -> dict:
        """Validate the settings section content."""
        errors = []
        warnings = []

        if 'settings' not in self.recipe_data:
            errors.append("Missing required 'settings' section")
            errors.append("💡 Add minimal settings section:")
            errors.append("settings:")
            errors.append("  description: 'Brief description of what this filter does'")
            return {'errors': errors, 'warnings': warnings}

        settings = self.recipe_data['settings']
        if not isinstance(settings, dict):
            errors.append("'settings' section must be a dictionary")
            return {'errors': errors, 'warnings': warnings}

        if 'description' not in settings:
            errors.append("Missing required 'description' in settings section")

        variables = settings.get('variables') or {}
        if not isinstance(variables, dict):
            errors.append("'variables' in settings must be a dictionary of name to value")
        else:
            for name, value in variables.items():
                if isinstance(value, (dict, list)):
                    errors.append(f"Variable '{name}' must be a single value, got {type(value).__name__}")

        return {'errors': errors, 'warnings': warnings}

    def _validate_filter_section(self) -> dict:
        """Validate the filter section shape; property values are checked by the processor."""
        errors = []
        warnings = []

        if 'filter' not in self.recipe_data:
            errors.append("Missing required 'filter' section")
            errors.append(f"💡 A filter needs '{SOURCE_FIELD}', '{OPERATOR}' and '{CRITERIA}'")
            return {'errors': errors, 'warnings': warnings}

        filter_section = self.recipe_data['filter']
        if not isinstance(filter_section, dict):
            errors.append("'filter' section must be a dictionary")
            return {'errors': errors, 'warnings': warnings}

        for key in filter_section:
            if key not in FILTER_PROPERTIES:
                warnings.append(f"Unknown filter property '{key}' will be ignored")

        if IGNORE_CASE in filter_section and LEGACY_IGNORE_CASE in filter_section:
            warnings.append(f"Both '{IGNORE_CASE}' and '{LEGACY_IGNORE_CASE}' given; using '{IGNORE_CASE}'")

        return {'errors': errors, 'warnings': warnings}

    def get_settings(self) -> dict:
        """Get the settings section."""
        if not self.recipe_data:
            raise RecipeValidationError("No recipe loaded")
        return self.recipe_data.get('settings', {})

    def get_variables(self) -> dict:
        """Get the recipe-defined variables used for ${name} macros."""
        return dict(self.get_settings().get('variables') or {})

    def get_filter_step(self) -> dict:
        """
        Get the filter section as a step configuration for FastFilterProcessor.
        """
        if not self.recipe_data:
            raise RecipeValidationError("No recipe loaded")

        step_config = dict(self.recipe_data['filter'])
        step_config[proc_type] = 'fast_filter'
        step_config.setdefault(step_desc, self.get_settings().get('description', 'Fast filter'))
        return step_config

    def get_declared_schema(self) -> Optional[Schema]:
        """Get the declared input schema, or None to infer it from the data."""
        if not self.recipe_data or 'schema' not in self.recipe_data:
            return None
        return Schema.from_dict(self.recipe_data['schema'])

    def summary(self) -> str:
        """Get a one-paragraph summary of the loaded recipe."""
        if not self.recipe_data:
            return "No recipe loaded"

        filter_section = self.recipe_data.get('filter', {})
        lines = [
            f"Recipe: {self.recipe_path or '<string>'}",
            f"  Description: {self.get_settings().get('description', '')}",
            f"  Filter: {filter_section.get(SOURCE_FIELD)} {filter_section.get(OPERATOR)} "
            f"'{filter_section.get(CRITERIA)}'",
            f"  Variables: {len(self.get_variables())}",
        ]
        if 'schema' in self.recipe_data:
            lines.append(f"  Declared fields: {len(self.recipe_data['schema'])}")
        return "\n".join(lines)
