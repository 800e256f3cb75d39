"""
Parsers for raw CI input strings.

Every parser treats empty or malformed input as absent and returns None
instead of raising, so callers can pass the result straight into a boto3
request builder that drops None values.
"""

import json
import re
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

TRUE_VALUES = ("1", "true", "yes", "on")


def is_url(s: Optional[str]) -> bool:
    """Return True only for well-formed https URLs."""
    if not s:
        return False

    try:
        url = urlparse(s)
    except (TypeError, ValueError):
        return False

    return url.scheme == "https" and bool(url.netloc)


def parse_tags(s: Optional[str]) -> Optional[List[Dict[str, Any]]]:
    """Decode a JSON tag blob.

    Accepts either the CloudFormation list form
    (``[{"Key": "a", "Value": "b"}]``) or a plain object (``{"a": "b"}``),
    which is converted to the list form. Undecodable input yields None.
    """
    if not s:
        return None

    try:
        tags = json.loads(s)
    except (TypeError, ValueError):
        return None

    if isinstance(tags, dict):
        return [{"Key": key, "Value": str(value)} for key, value in tags.items()]

    return tags


def parse_arns(s: Optional[str]) -> Optional[List[str]]:
    """Split a comma separated ARN list."""
    return s.split(",") if s else None


def parse_string(s: Optional[str]) -> Optional[str]:
    return s if s else None


def parse_number(s: Optional[str]) -> Optional[int]:
    """Parse a leading integer, ignoring any trailing characters.

    Zero is reported as absent, the same as a value that fails to parse.
    """
    if not s:
        return None

    match = _LEADING_INT.match(s)
    if not match:
        return None

    return int(match.group(1)) or None


def parse_bool(s: Optional[str]) -> bool:
    if isinstance(s, bool):
        return s
    return bool(s) and s.strip().lower() in TRUE_VALUES


def parse_capabilities(s: Optional[str]) -> List[str]:
    if not s:
        return []
    return [cap.strip() for cap in s.split(",") if cap.strip()]


def parse_parameters(parameter_overrides: str) -> List[Dict[str, Any]]:
    """Parse ``Key=Value`` overrides into CloudFormation parameters.

    Repeated keys are merged rather than overwritten: ``A=1,A=2`` becomes a
    single ``A`` parameter with value ``"1,2"``. Keys keep the order in
    which they were first seen.
    """
    parameters: Dict[str, Optional[str]] = {}

    for parameter in parameter_overrides.split(","):
        key, sep, value = parameter.strip().partition("=")

        current = parameters.get(key)
        if not current:
            parameters[key] = value if sep else None
        else:
            parameters[key] = f"{current},{value}"

    return [
        {"ParameterKey": key, "ParameterValue": value}
        for key, value in parameters.items()
    ]
