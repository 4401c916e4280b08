"""Tests for the project name transforms."""
import pytest

from glfast.scaffold.naming import (
    TEMPLATE_FUNCTIONS,
    NamingTokens,
    skip_first_and_last_part,
    skip_first_part,
    skip_last_part,
    to_camel_case,
    to_pascal_case,
)


class TestCaseConversion:
    """Pascal and camel case."""

    @pytest.mark.parametrize("value,expected", [
        ("hello-world", "HelloWorld"),
        ("billing-svc", "BillingSvc"),
        ("tope", "Tope"),
        ("a-b-c", "ABC"),
        ("already-Mixed-Case", "AlreadyMixedCase"),
    ])
    def test_pascal_case(self, value, expected):
        assert to_pascal_case(value) == expected

    @pytest.mark.parametrize("value,expected", [
        ("hello-world", "helloWorld"),
        ("Billing-svc", "billingSvc"),
        ("tope", "tope"),
    ])
    def test_camel_case(self, value, expected):
        assert to_camel_case(value) == expected

    @pytest.mark.parametrize("name", ["hello-world", "billing-svc", "x-y", "hello-world-android"])
    def test_camel_is_pascal_with_first_letter_flipped(self, name):
        pascal = to_pascal_case(name)
        camel = to_camel_case(name)
        assert pascal[0].isupper()
        assert camel[0].islower()
        assert camel == pascal[0].lower() + pascal[1:]

    def test_empty_segments_are_dropped(self):
        assert to_pascal_case("hello--world-") == "HelloWorld"
        assert to_pascal_case("-") == ""

    def test_empty_input_does_not_crash(self):
        assert to_pascal_case("") == ""
        assert to_camel_case("") == ""

    def test_unicode_first_characters(self):
        assert to_pascal_case("élan-über") == "ÉlanÜber"
        assert to_camel_case("Élan-über") == "élanÜber"


class TestPartSkipping:
    """Dropping leading and trailing segments."""

    def test_skip_first_part(self):
        assert skip_first_part("hello-world-android") == "worldAndroid"
        assert skip_first_part("hello-world") == "world"
        assert skip_first_part("tope") == "tope"

    def test_skip_last_part(self):
        assert skip_last_part("hello-world-android") == "hello-world"
        assert skip_last_part("hello-world") == "hello"
        assert skip_last_part("tope") == "tope"

    def test_skip_first_and_last_part(self):
        assert skip_first_and_last_part("hello-world-golang") == "world"
        assert skip_first_and_last_part("hello-world") == "world"
        assert skip_first_and_last_part("hello") == "hello"
        assert skip_first_and_last_part("team-billing-api-golang") == "billing-api"


class TestNamingTokens:
    """Token vocabulary used in paths."""

    def test_tokens_for_name(self):
        tokens = NamingTokens.for_name("hello-world-android")
        assert tokens.replacements() == {
            "{{Name}}": "hello-world-android",
            "{{Name_ToPascalCase}}": "HelloWorldAndroid",
            "{{Name_ToCamelCase}}": "helloWorldAndroid",
            "{{Name_SkipFirstPart}}": "worldAndroid",
            "{{Name_SkipLastPart}}": "hello-world",
            "{{Name_SkipFirstAndLastPart}}": "world",
        }

    def test_no_token_is_substring_of_another(self):
        spellings = list(NamingTokens.for_name("x").replacements())
        for token in spellings:
            for other in spellings:
                if token != other:
                    assert token not in other

    def test_template_function_names(self):
        assert set(TEMPLATE_FUNCTIONS) == {
            "ToPascalCase", "ToCamelCase", "SkipFirstPart", "SkipLastPart", "SkipFirstAndLastPart",
        }
