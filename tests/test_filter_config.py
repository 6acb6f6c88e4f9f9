"""
Test FilterConfig construction and raw-to-resolved transition.
"""

import pytest

from dataclasses import FrozenInstanceError

from fast_filter.core.variable_substitution import VariableSubstitution, VariableSubstitutionError
from fast_filter.config.filter_config import (
    CRITERIA,
    OPERATOR,
    SOURCE_FIELD,
    FilterConfig,
    FilterConfigError,
)


def create_raw_config(**overrides):
    """Create a raw filter config dictionary with overrides."""
    values = {
        'sourceField': 'Region',
        'operator': '=',
        'criteria': '${region}',
        'ignoreCase': False,
    }
    values.update(overrides)
    return values


def test_from_dict():
    """Test building a config from recipe properties."""
    print("\nTesting FilterConfig.from_dict...")

    config = FilterConfig.from_dict(create_raw_config(ignoreCase='yes'))

    assert config.source_field == 'Region'
    assert config.operator == '='
    assert config.criteria == '${region}'
    assert config.ignore_case is True

    print("✓ Properties read with camelCase names")


def test_legacy_ignore_case_alias():
    """Test that shouldIgnoreCase is accepted and ignoreCase wins."""
    legacy = FilterConfig.from_dict({'sourceField': 'a', 'operator': '=', 'criteria': 'x',
                                     'shouldIgnoreCase': True})
    assert legacy.ignore_case is True

    both = FilterConfig.from_dict({'shouldIgnoreCase': True, 'ignoreCase': False})
    assert both.ignore_case is False


def test_numeric_criteria_become_strings():
    """Test that YAML numbers are compared as strings."""
    config = FilterConfig.from_dict(create_raw_config(criteria=100))
    assert config.criteria == '100'


def test_bad_property_types():
    """Test that wrongly typed properties are rejected."""
    print("\nTesting bad property types...")

    with pytest.raises(FilterConfigError):
        FilterConfig.from_dict(create_raw_config(criteria=['a', 'b']))
    with pytest.raises(FilterConfigError):
        FilterConfig.from_dict(create_raw_config(ignoreCase='sometimes'))
    with pytest.raises(FilterConfigError):
        FilterConfig.from_dict('sourceField=Region')

    print("✓ Bad types raise FilterConfigError")


def test_config_is_immutable():
    config = FilterConfig.from_dict(create_raw_config())
    with pytest.raises(FrozenInstanceError):
        config.criteria = 'west'


def test_deferred_detection():
    """Test that only macro-enabled properties can be deferred."""
    print("\nTesting deferred detection...")

    deferred = FilterConfig.from_dict(create_raw_config())
    assert deferred.is_deferred(CRITERIA)
    assert deferred.has_deferred_values

    # Macros in other properties are never deferred
    odd = FilterConfig.from_dict(create_raw_config(sourceField='${field}', criteria='west'))
    assert not odd.is_deferred(SOURCE_FIELD)
    assert not odd.is_deferred(OPERATOR)
    assert not odd.has_deferred_values

    print("✓ Only criteria may be deferred")


def test_resolve_returns_new_config():
    """Test that resolving leaves the raw config untouched."""
    print("\nTesting resolve...")

    raw = FilterConfig.from_dict(create_raw_config())
    resolved = raw.resolve(VariableSubstitution({'region': 'west'}))

    assert resolved.criteria == 'west'
    assert raw.criteria == '${region}'
    assert resolved.source_field == raw.source_field
    assert not resolved.has_deferred_values

    print("✓ Resolved config is a new value")


def test_resolve_without_macros_is_identity():
    config = FilterConfig.from_dict(create_raw_config(criteria='west'))
    assert config.resolve(None) is config


def test_resolve_errors():
    """Test resolving with missing variables."""
    raw = FilterConfig.from_dict(create_raw_config())

    with pytest.raises(VariableSubstitutionError):
        raw.resolve(None)
    with pytest.raises(VariableSubstitutionError):
        raw.resolve(VariableSubstitution({'country': 'US'}))


def test_resolve_unescapes_without_variables():
    """Test that a literal $${ is unescaped even with no variables supplied."""
    config = FilterConfig.from_dict(create_raw_config(criteria='$${literal}'))
    assert not config.has_deferred_values
    assert config.resolve(None).criteria == '${literal}'


def test_to_dict():
    config = FilterConfig.from_dict(create_raw_config(criteria='west'))
    assert config.to_dict() == {
        'sourceField': 'Region',
        'operator': '=',
        'criteria': 'west',
        'ignoreCase': False,
    }


if __name__ == '__main__':
    print("Testing filter configuration...")

    tests = [
        test_from_dict,
        test_legacy_ignore_case_alias,
        test_numeric_criteria_become_strings,
        test_bad_property_types,
        test_config_is_immutable,
        test_deferred_detection,
        test_resolve_returns_new_config,
        test_resolve_without_macros_is_identity,
        test_resolve_errors,
        test_resolve_unescapes_without_variables,
        test_to_dict,
    ]

    failed = 0
    for test in tests:
        try:
            test()
        except AssertionError as e:
            failed += 1
            print(f"✗ {test.__name__} failed: {e}")

    if failed == 0:
        print("\n✅ All filter configuration tests passed!")
    else:
        print(f"\n❌ {failed} filter configuration test(s) failed!")
