"""
Tests for CI input parsers.
"""

import pytest

from cloudformation.parsers import (
    is_url,
    parse_arns,
    parse_bool,
    parse_capabilities,
    parse_number,
    parse_parameters,
    parse_string,
    parse_tags,
)


class TestIsUrl:
    """Test https URL detection."""

    def test_https_url(self) -> None:
        assert is_url("https://x.com") is True
        assert is_url("https://bucket.s3.amazonaws.com/template.yaml") is True

    def test_http_url_rejected(self) -> None:
        assert is_url("http://x.com") is False

    def test_not_a_url(self) -> None:
        """Test that non-URLs, including file paths, are rejected without raising."""
        assert is_url("not a url") is False
        assert is_url("templates/stack.yaml") is False
        assert is_url("https://[broken") is False
        assert is_url("") is False
        assert is_url(None) is False


class TestParseTags:
    """Test tag JSON decoding."""

    def test_object_converted_to_tag_list(self) -> None:
        assert parse_tags('{"a":"b"}') == [{"Key": "a", "Value": "b"}]

    def test_tag_list_returned_as_is(self) -> None:
        tags = '[{"Key": "Team", "Value": "platform"}, {"Key": "Env", "Value": "dev"}]'
        assert parse_tags(tags) == [
            {"Key": "Team", "Value": "platform"},
            {"Key": "Env", "Value": "dev"},
        ]

    def test_invalid_json_is_absent(self) -> None:
        """Test that malformed JSON silently becomes no tags."""
        assert parse_tags("not json") is None
        assert parse_tags("") is None
        assert parse_tags(None) is None


class TestParseArns:
    """Test ARN list splitting."""

    def test_split_preserves_order(self) -> None:
        arns = "arn:aws:sns:us-east-1:123:a,arn:aws:sns:us-east-1:123:b"
        assert parse_arns(arns) == [
            "arn:aws:sns:us-east-1:123:a",
            "arn:aws:sns:us-east-1:123:b",
        ]

    def test_single_arn(self) -> None:
        assert parse_arns("arn:aws:sns:us-east-1:123:a") == ["arn:aws:sns:us-east-1:123:a"]

    def test_empty_is_absent(self) -> None:
        assert parse_arns("") is None
        assert parse_arns(None) is None


class TestParseString:
    def test_non_empty(self) -> None:
        assert parse_string("arn:aws:iam::123:role/deploy") == "arn:aws:iam::123:role/deploy"

    def test_empty(self) -> None:
        assert parse_string("") is None
        assert parse_string(None) is None


class TestParseNumber:
    """Test leading integer parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [("30", 30), ("  15", 15), ("12abc", 12), ("-5", -5), ("+7", 7)],
    )
    def test_parses_leading_integer(self, value, expected) -> None:
        assert parse_number(value) == expected

    def test_zero_is_absent(self) -> None:
        assert parse_number("0") is None

    def test_unparseable_is_absent(self) -> None:
        assert parse_number("abc") is None
        assert parse_number("") is None
        assert parse_number(None) is None


class TestParseParameters:
    """Test parameter override parsing."""

    def test_simple_parameters(self) -> None:
        assert parse_parameters("MyParam1=myValue1,MyParam2=myValue2") == [
            {"ParameterKey": "MyParam1", "ParameterValue": "myValue1"},
            {"ParameterKey": "MyParam2", "ParameterValue": "myValue2"},
        ]

    def test_whitespace_trimmed(self) -> None:
        assert parse_parameters(" A=1 , B=2") == [
            {"ParameterKey": "A", "ParameterValue": "1"},
            {"ParameterKey": "B", "ParameterValue": "2"},
        ]

    def test_repeated_key_joined(self) -> None:
        assert parse_parameters("A=1,A=2") == [
            {"ParameterKey": "A", "ParameterValue": "1,2"},
        ]

    def test_list_values_keep_first_seen_order(self) -> None:
        """Test that list parameters interleaved with others keep key order."""
        result = parse_parameters("Subnets=subnet-1,Name=web,Subnets=subnet-2")
        assert result == [
            {"ParameterKey": "Subnets", "ParameterValue": "subnet-1,subnet-2"},
            {"ParameterKey": "Name", "ParameterValue": "web"},
        ]

    def test_value_containing_equals(self) -> None:
        assert parse_parameters("Query=a=b") == [
            {"ParameterKey": "Query", "ParameterValue": "a=b"},
        ]

    def test_missing_value(self) -> None:
        assert parse_parameters("Flag") == [
            {"ParameterKey": "Flag", "ParameterValue": None},
        ]


class TestParseCapabilities:
    def test_split_and_trim(self) -> None:
        assert parse_capabilities("CAPABILITY_IAM, CAPABILITY_NAMED_IAM") == [
            "CAPABILITY_IAM",
            "CAPABILITY_NAMED_IAM",
        ]

    def test_empty(self) -> None:
        assert parse_capabilities("") == []
        assert parse_capabilities(None) == []


class TestParseBool:
    @pytest.mark.parametrize("value", ["1", "true", "TRUE", "yes", "on", " True "])
    def test_true_values(self, value) -> None:
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", ["0", "false", "", "no", None])
    def test_false_values(self, value) -> None:
        assert parse_bool(value) is False

    def test_bool_passthrough(self) -> None:
        assert parse_bool(True) is True
        assert parse_bool(False) is False
