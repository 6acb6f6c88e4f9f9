"""
Test ${name} macro substitution for deferred criteria.
"""

import pytest

from datetime import datetime

from fast_filter.core.variable_substitution import (
    VariableSubstitution,
    VariableSubstitutionError,
    find_variables,
    has_variables,
    parse_cli_variables,
    substitute_variables,
)


FIXED_NOW = datetime(2024, 3, 5, 14, 30, 15)


def test_custom_variable_substitution():
    """Test replacing macros with custom variables."""
    print("\nTesting custom variables...")

    substitution = VariableSubstitution({'region': 'west', 'limit': 100})

    assert substitution.substitute('${region}') == 'west'
    assert substitution.substitute('Region ${region} over ${limit}') == 'Region west over 100'
    assert substitution.substitute('no macros here') == 'no macros here'
    assert substitution.substitute(None) is None

    print("✓ Custom variables substituted")


def test_regex_braces_are_not_macros():
    """Test that regex quantifiers survive substitution."""
    print("\nTesting regex quantifiers...")

    substitution = VariableSubstitution({'prefix': 'CAN'})

    assert not has_variables('a{2}')
    assert substitution.substitute('a{2}') == 'a{2}'
    assert substitution.substitute('^${prefix}[0-9]{3}$') == '^CAN[0-9]{3}$'

    print("✓ Quantifiers are left alone")


def test_escaped_macro():
    """Test that $${ produces a literal ${."""
    print("\nTesting escaped macros...")

    substitution = VariableSubstitution({'name': 'x'})

    assert not has_variables('$${name}')
    assert substitution.substitute('$${name}') == '${name}'
    assert substitution.substitute('$${name} and ${name}') == '${name} and x'

    print("✓ Escapes unescaped")


def test_inserted_values_are_not_unescaped():
    """Test that a $${ inside a variable value is inserted as written."""
    print("\nTesting escapes inside variable values...")

    substitution = VariableSubstitution({'x': 'a$${b}', 'y': '${x}'})

    assert substitution.substitute('${x}') == 'a$${b}'
    assert substitution.substitute('$${x}-${x}') == '${x}-a$${b}'
    # Values are inserted once, never expanded again
    assert substitution.substitute('${y}') == '${x}'

    print("✓ Inserted values left untouched")


def test_unknown_variable_raises():
    """Test that an unknown macro name is an error."""
    print("\nTesting unknown variable...")

    substitution = VariableSubstitution({'region': 'west'})

    with pytest.raises(VariableSubstitutionError, match="Unknown variable 'country'"):
        substitution.substitute('${country}')

    assert substitution.validate_template('${region} ${country} ${year}') == ['country']

    print("✓ Unknown variables reported")


def test_date_time_variables():
    """Test built-in date/time variables with a fixed clock."""
    print("\nTesting date/time variables...")

    substitution = VariableSubstitution(now=FIXED_NOW)

    assert substitution.substitute('${year}-${month}-${day}') == '2024-03-05'
    assert substitution.substitute('${date}') == '20240305'
    assert substitution.substitute('${timestamp}') == '20240305_143015'

    # Custom variables override built-ins
    overriding = VariableSubstitution({'year': '1999'}, now=FIXED_NOW)
    assert overriding.substitute('${year}') == '1999'

    print("✓ Date/time variables resolved")


def test_add_and_remove_custom_variables():
    """Test managing custom variables."""
    substitution = VariableSubstitution(now=FIXED_NOW)
    substitution.add_custom_variable('dept', 'SALES')
    assert substitution.get_available_variables()['dept'] == 'SALES'

    substitution.remove_custom_variable('dept')
    assert 'dept' not in substitution.get_available_variables()

    with pytest.raises(VariableSubstitutionError):
        substitution.add_custom_variable('  ', 'x')


def test_find_variables():
    assert find_variables('${a}-${b}-${a}') == ['a', 'b']
    assert find_variables('plain') == []
    assert find_variables(42) == []
    assert substitute_variables('${x}!', {'x': 'hi'}) == 'hi!'


def test_parse_cli_variables():
    """Test parsing --var NAME=VALUE arguments."""
    print("\nTesting CLI variable parsing...")

    variables = parse_cli_variables(['region=west', 'pattern=a=b', 'padded= keep '])

    assert variables == {'region': 'west', 'pattern': 'a=b', 'padded': ' keep '}
    assert parse_cli_variables(None) == {}

    with pytest.raises(VariableSubstitutionError):
        parse_cli_variables(['novalue'])
    with pytest.raises(VariableSubstitutionError):
        parse_cli_variables(['=value'])

    print("✓ CLI variables parsed, values kept verbatim")


if __name__ == '__main__':
    print("Testing variable substitution...")

    tests = [
        test_custom_variable_substitution,
        test_regex_braces_are_not_macros,
        test_escaped_macro,
        test_inserted_values_are_not_unescaped,
        test_unknown_variable_raises,
        test_date_time_variables,
        test_add_and_remove_custom_variables,
        test_find_variables,
        test_parse_cli_variables,
    ]

    failed = 0
    for test in tests:
        try:
            test()
        except AssertionError as e:
            failed += 1
            print(f"✗ {test.__name__} failed: {e}")

    if failed == 0:
        print("\n✅ All variable substitution tests passed!")
    else:
        print(f"\n❌ {failed} variable substitution test(s) failed!")
