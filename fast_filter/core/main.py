"""Main functionality for fast_filter package."""

import sys
import logging

from argparse import Namespace

from fast_filter.core.base_processor import StepProcessorError, registry
from fast_filter.core.failure_collector import ConfigurationError
from fast_filter.core.file_reader import FileReader, FileReaderError
from fast_filter.core.file_writer import FileWriter, FileWriterError
from fast_filter.core.operators import Operator
from fast_filter.core.schema import Schema
from fast_filter.core.variable_substitution import (
    VariableSubstitution,
    VariableSubstitutionError,
    find_variables,
    parse_cli_variables,
)
from fast_filter.config.filter_config import CRITERIA
from fast_filter.config.recipe_loader import RecipeLoader, RecipeValidationError


# Set up logging
logger = logging.getLogger(__name__)


def run_main(args: Namespace) -> int:
    """
    Main entry point for the package functionality.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    verbose = getattr(args, 'verbose', False)

    # Log to stderr so filtered rows on stdout stay clean
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(levelname)s: %(message)s',
        stream=sys.stderr
    )

    try:
        if getattr(args, 'list_operators', False):
            return list_operators()

        if getattr(args, 'validate_recipe', None):
            return validate_recipe_file(
                args.validate_recipe,
                input_file=getattr(args, 'input_file', None),
                variable_args=getattr(args, 'variable_overrides', None)
            )

        if getattr(args, 'recipe_file', None):
            if not getattr(args, 'input_file', None):
                print("Error: --input is required to run a recipe", file=sys.stderr)
                return 1
            return process_recipe(args)

        # No recipe specified - show usage
        print("Error: Recipe file is required", file=sys.stderr)
        print("Usage: fast-filter recipe.yaml --input data.csv [--output kept.csv] [--var name=value ...]",
              file=sys.stderr)
        print("Use --help for full usage information", file=sys.stderr)
        return 1

    except Exception as e:
        # For unexpected errors, always show them clearly
        print(f"Error: {e}", file=sys.stderr)
        if verbose:
            import traceback
            traceback.print_exc()
        return 1


def build_variable_substitution(loader: RecipeLoader, variable_args) -> VariableSubstitution:
    """Combine recipe variables with --var overrides (overrides win)."""
    variables = loader.get_variables()

    cli_variables = parse_cli_variables(variable_args or [])
    if cli_variables:
        logger.info(f"Parsed {len(cli_variables)} variable overrides from CLI")
        variables.update(cli_variables)

    return VariableSubstitution(custom_variables=variables)


def process_recipe(args: Namespace) -> int:
    """
    Load a recipe, filter the input file and write the kept rows.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    recipe_file = args.recipe_file
    input_file = args.input_file
    output_file = getattr(args, 'output_file', None)
    verbose = getattr(args, 'verbose', False)

    try:
        loader = RecipeLoader()
        loader.load_recipe_file(recipe_file)
        if verbose:
            logger.debug(loader.summary())

        data = FileReader.read_file(input_file)
        logger.info(f"Read {len(data)} rows from '{input_file}'")

        input_schema = loader.get_declared_schema()
        if input_schema is None:
            input_schema = Schema.from_dataframe(data)

        processor = registry.create_processor(loader.get_filter_step())
        processor.configure(input_schema)

        processor.variable_substitution = build_variable_substitution(
            loader, getattr(args, 'variable_overrides', None)
        )
        processor.initialize()

        filtered = processor.execute(data, input_schema)

        if output_file:
            FileWriter.write_file(filtered, output_file)
            print(f"✓ Kept {len(filtered)} of {len(data)} rows → {output_file}")
        else:
            sys.stdout.write(FileWriter.to_csv_text(filtered))

        return 0

    except ConfigurationError as e:
        print(f"Filter configuration is invalid for recipe: {recipe_file}", file=sys.stderr)
        for failure in e.failures:
            print(f"  ❌ {failure}", file=sys.stderr)
        return 1
    except FileNotFoundError:
        print(f"Recipe file not found: {recipe_file}", file=sys.stderr)
        return 1
    except (RecipeValidationError, FileReaderError, FileWriterError,
            VariableSubstitutionError, StepProcessorError) as e:
        print(f"Recipe processing failed: {e}", file=sys.stderr)
        return 1


def validate_recipe_file(recipe_path: str, input_file=None, variable_args=None) -> int:
    """
    Validate a recipe file, reporting every configuration problem.

    The input schema comes from the recipe's 'schema' section, else from the
    input file when one is given; without either, field checks are skipped.
    """
    try:
        loader = RecipeLoader()
        loader.load_recipe_file(recipe_path)

        input_schema = loader.get_declared_schema()
        if input_schema is None and input_file:
            input_schema = Schema.from_dataframe(FileReader.read_file(input_file))

        processor = registry.create_processor(loader.get_filter_step())
        result = processor.validate(input_schema)

        if not result.valid:
            print(f"Recipe validation failed for: {recipe_path}")
            for failure in result.failures:
                print(f"  ❌ {failure}")
            return 1

        print(f"✓ Recipe validation successful: {recipe_path}")
        if input_schema is None:
            print("  Field checks skipped (no schema section and no --input)")

        deferred = find_variables(processor.filter_config.criteria)
        if deferred:
            substitution = build_variable_substitution(loader, variable_args)
            missing = substitution.validate_template(processor.filter_config.criteria)
            print(f"  Deferred {CRITERIA} variables: {', '.join(deferred)}")
            if missing:
                print(f"  ⚠️  No value yet for: {', '.join(missing)} (supply with --var)")

        return 0

    except RecipeValidationError as e:
        print(f"Recipe validation error: {e}")
        return 1
    except FileNotFoundError:
        print(f"Recipe file not found: {recipe_path}")
        return 1
    except (FileReaderError, VariableSubstitutionError, StepProcessorError) as e:
        print(f"Error validating recipe: {e}")
        return 1


def list_operators() -> int:
    """Print the supported operator tokens."""
    print("Supported filter operators")
    print("=" * 40)
    for operator in Operator:
        complement = operator.complement
        paired = f"(complement: {complement.token})" if complement is not None else ""
        print(f"{operator.token!r:<25} {paired}")
    return 0
