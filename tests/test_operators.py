"""
Test the operator catalog: token resolution and comparison semantics.
"""

import re

import pytest

from fast_filter.core.operators import (
    OPERATORS_BY_TOKEN,
    Operator,
    OperatorError,
    OperatorKind,
    UnknownOperatorError,
    evaluate,
    get_supported_tokens,
    resolve,
)


ALL_TOKENS = [
    '=', '!=', '>', '>=', '<', '<=',
    'contains', 'does not contain',
    'starts with', 'ends with', 'does not start with', 'does not end with',
    'matches regex', 'does not match regex',
]

SAMPLE_STRINGS = ['', 'a', 'abc', 'ABC', 'abcde', ' abc ', '10', '9', 'b']


def _pattern_for(operator, criteria):
    return re.compile(criteria) if operator.is_regex else None


def test_catalog_has_fourteen_tokens():
    """Test that every token resolves and the table is a bijection."""
    print("\nTesting operator catalog size...")

    assert len(Operator) == 14
    assert sorted(get_supported_tokens()) == sorted(ALL_TOKENS)
    assert len(set(OPERATORS_BY_TOKEN.values())) == 14

    for token in ALL_TOKENS:
        assert resolve(token).token == token

    print("✓ All 14 tokens resolve to distinct operators")


def test_resolve_is_exact_and_case_sensitive():
    """Test that near-miss tokens are rejected."""
    print("\nTesting exact token matching...")

    for bad_token in ['CONTAINS', 'Contains', ' contains', 'contains ', 'starts', '==', '', 'regex']:
        with pytest.raises(UnknownOperatorError) as excinfo:
            resolve(bad_token)
        assert excinfo.value.token == bad_token

    print("✓ Near-miss tokens raise UnknownOperatorError")


def test_unknown_operator_error_message():
    """Test the unknown token message and exception hierarchy."""
    print("\nTesting UnknownOperatorError...")

    with pytest.raises(UnknownOperatorError, match="Unknown operator type for token: between"):
        resolve('between')

    # Non-strings never resolve
    with pytest.raises(UnknownOperatorError):
        resolve(None)

    assert issubclass(UnknownOperatorError, OperatorError)
    assert issubclass(UnknownOperatorError, ValueError)

    print("✓ Unknown tokens carry the offending token")


def test_token_table_is_read_only():
    """Test that the lookup table cannot be modified."""
    print("\nTesting read-only token table...")

    with pytest.raises(TypeError):
        OPERATORS_BY_TOKEN['like'] = Operator.CONTAINS

    print("✓ Token table is immutable")


def test_complementary_pairs():
    """Test that the seven 'not' pairs are exact complements."""
    print("\nTesting complementary operator pairs...")

    pairs = [
        (Operator.EQUAL, Operator.NOT_EQUAL),
        (Operator.CONTAINS, Operator.NOT_CONTAINS),
        (Operator.STARTS_WITH, Operator.NOT_STARTS_WITH),
        (Operator.ENDS_WITH, Operator.NOT_ENDS_WITH),
        (Operator.MATCH_REGEXP, Operator.NOT_MATCH_REGEXP),
    ]

    for positive, negative in pairs:
        assert positive.complement is negative
        assert negative.complement is positive
        for value in SAMPLE_STRINGS:
            for criteria in ['a', 'bc', 'ABC', 'e$', '']:
                pattern = _pattern_for(positive, criteria)
                assert evaluate(positive, value, criteria, pattern) != evaluate(negative, value, criteria, pattern)

    print("✓ Complementary pairs always disagree")


def test_ordering_operators_are_not_complements():
    """Test that ordering operators have no 'not' partner."""
    print("\nTesting ordering operators...")

    for operator in (Operator.GREATER, Operator.GREATER_OR_EQUAL, Operator.LESS, Operator.LESS_OR_EQUAL):
        assert operator.kind is OperatorKind.ORDERING
        assert operator.complement is None

    print("✓ Ordering operators are not paired")


def test_ordering_is_lexicographic():
    """Test that ordering compares strings, not numbers."""
    print("\nTesting lexicographic ordering...")

    # '10' < '9' as strings
    assert evaluate(Operator.LESS, '10', '9')
    assert not evaluate(Operator.GREATER, '10', '9')
    assert evaluate(Operator.GREATER_OR_EQUAL, 'b', 'b')
    assert evaluate(Operator.LESS_OR_EQUAL, 'a', 'b')
    # Upper case sorts before lower case by code point
    assert evaluate(Operator.LESS, 'Z', 'a')

    print("✓ Ordering uses string comparison")


def test_containment_prefix_suffix():
    """Test substring, prefix and suffix operators."""
    print("\nTesting containment, prefix and suffix...")

    assert evaluate(Operator.CONTAINS, 'CANNED BEANS', 'NED B')
    assert evaluate(Operator.NOT_CONTAINS, 'CANNED BEANS', 'SOUP')
    assert evaluate(Operator.STARTS_WITH, 'CANNED BEANS', 'CAN')
    assert not evaluate(Operator.STARTS_WITH, 'CANNED BEANS', 'can')
    assert evaluate(Operator.ENDS_WITH, 'CANNED BEANS', 'BEANS')
    assert evaluate(Operator.NOT_ENDS_WITH, 'CANNED BEANS', 'CORN')
    assert evaluate(Operator.NOT_STARTS_WITH, 'FRESH FISH', 'CAN')

    print("✓ Containment, prefix and suffix operators work")


def test_regex_uses_find_semantics():
    """Test that regex operators match anywhere in the value."""
    print("\nTesting regex find semantics...")

    assert evaluate(Operator.MATCH_REGEXP, 'abcde', 'cd', re.compile('cd'))
    assert evaluate(Operator.MATCH_REGEXP, 'abcde', 'b.d', re.compile('b.d'))
    assert not evaluate(Operator.MATCH_REGEXP, 'abcde', '^cd', re.compile('^cd'))
    assert evaluate(Operator.NOT_MATCH_REGEXP, 'abcde', 'xyz', re.compile('xyz'))

    print("✓ Regex operators are unanchored")


def test_regex_requires_pattern():
    """Test that regex evaluation without a compiled pattern fails loudly."""
    print("\nTesting regex without pattern...")

    with pytest.raises(OperatorError):
        evaluate(Operator.MATCH_REGEXP, 'abc', 'b')

    with pytest.raises(OperatorError):
        evaluate('=', 'abc', 'abc')

    print("✓ Missing pattern raises OperatorError")


def test_operator_str_is_token():
    assert str(Operator.NOT_CONTAINS) == 'does not contain'
    assert Operator.MATCH_REGEXP.is_regex
    assert not Operator.CONTAINS.is_regex


if __name__ == '__main__':
    print("Testing operator catalog...")

    tests = [
        test_catalog_has_fourteen_tokens,
        test_resolve_is_exact_and_case_sensitive,
        test_unknown_operator_error_message,
        test_token_table_is_read_only,
        test_complementary_pairs,
        test_ordering_operators_are_not_complements,
        test_ordering_is_lexicographic,
        test_containment_prefix_suffix,
        test_regex_uses_find_semantics,
        test_regex_requires_pattern,
        test_operator_str_is_token,
    ]

    failed = 0
    for test in tests:
        try:
            test()
        except AssertionError as e:
            failed += 1
            print(f"✗ {test.__name__} failed: {e}")

    if failed == 0:
        print("\n✅ All operator catalog tests passed!")
    else:
        print(f"\n❌ {failed} operator catalog test(s) failed!")
