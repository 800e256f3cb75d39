"""
Configuration for stack deployments.

Inputs arrive as raw strings (CI action inputs, CLI options or a YAML file)
and are turned into CloudFormation request arguments here.
"""

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml
from jsonschema import ValidationError, validate

from cloudformation.exceptions import TemplateError
from cloudformation.links import BITLY_API_URL, BITLY_DOMAIN, LinkShortener
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

ROLLBACK_TRIGGER_TYPE = "AWS::CloudWatch::Alarm"

BOOLEAN_FIELDS = (
    "no_execute_changeset",
    "no_delete_failed_changeset",
    "no_fail_on_empty_changeset",
    "disable_rollback",
    "termination_protection",
)

_SCALAR = {"type": ["string", "integer", "boolean", "null"]}

CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "template": {"type": "string"},
        "capabilities": {"type": "string"},
        "parameter-overrides": {"type": "string"},
        "no-execute-changeset": _SCALAR,
        "no-delete-failed-changeset": _SCALAR,
        "no-fail-on-empty-changeset": _SCALAR,
        "disable-rollback": _SCALAR,
        "termination-protection": _SCALAR,
        "timeout-in-minutes": _SCALAR,
        "notification-arns": {"type": "string"},
        "role-arn": {"type": "string"},
        "tags": {"type": ["string", "object", "array"]},
        "resource-types": {"type": "string"},
        "rollback-monitoring-minutes": _SCALAR,
        "rollback-trigger-arns": {"type": "string"},
        "region": {"type": "string"},
        "profile": {"type": "string"},
        "workspace": {"type": "string"},
        "shortener-token": {"type": "string"},
        "shortener-url": {"type": "string"},
        "shortener-domain": {"type": "string"},
    },
    "additionalProperties": False,
}


class ConfigurationError(Exception):
    """Raised when deployment configuration is invalid or cannot be loaded."""


@dataclass
class DeployConfig:
    """Inputs for a single stack deployment."""

    # Stack
    name: Optional[str] = None
    template: Optional[str] = None
    capabilities: str = "CAPABILITY_IAM"
    parameter_overrides: Optional[str] = None
    notification_arns: Optional[str] = None
    role_arn: Optional[str] = None
    tags: Optional[str] = None
    resource_types: Optional[str] = None
    timeout_in_minutes: Optional[str] = None
    rollback_monitoring_minutes: Optional[str] = None
    rollback_trigger_arns: Optional[str] = None
    disable_rollback: bool = False
    termination_protection: bool = False

    # Change set behaviour
    no_execute_changeset: bool = False
    no_delete_failed_changeset: bool = False
    no_fail_on_empty_changeset: bool = False

    # AWS session
    region: Optional[str] = None
    profile: Optional[str] = None

    # Relative template paths are resolved against this directory
    workspace: Optional[str] = None

    # Change set link shortening
    shortener_token: Optional[str] = None
    shortener_url: str = BITLY_API_URL
    shortener_domain: str = BITLY_DOMAIN

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeployConfig":
        """Create config from a dictionary of inputs.

        Keys may use the action's hyphenated input names. Boolean inputs
        accept CI strings such as ``"1"`` or ``"true"``.
        """
        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}

        for key, value in data.items():
            attr = key.replace("-", "_")
            if attr not in known:
                raise ConfigurationError(f"Unknown configuration key: {key}")
            if value is None:
                continue

            if attr in BOOLEAN_FIELDS:
                values[attr] = parse_bool(value if isinstance(value, bool) else str(value))
            elif attr == "tags" and not isinstance(value, str):
                values[attr] = json.dumps(value)
            else:
                values[attr] = str(value)

        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def validate(self) -> None:
        """Check that the required inputs are present."""
        missing = [key for key in ("name", "template") if not getattr(self, key)]
        if missing:
            raise ConfigurationError(
                f"Missing required input(s): {', '.join(missing)}"
            )

    def load_template(self) -> Tuple[Optional[str], Optional[str]]:
        """Return ``(TemplateBody, TemplateURL)`` for the configured template."""
        if is_url(self.template):
            return None, self.template

        path = Path(self.template or "")
        if not path.is_absolute() and self.workspace:
            path = Path(self.workspace) / path

        try:
            return path.read_text(encoding="utf-8"), None
        except OSError as e:
            raise TemplateError(f"Unable to read template {path}: {e}") from e

    def rollback_configuration(self) -> Optional[Dict[str, Any]]:
        """Build the RollbackConfiguration argument, if any input asks for one."""
        trigger_arns = parse_arns(self.rollback_trigger_arns)
        monitoring_minutes = parse_number(self.rollback_monitoring_minutes)

        if not trigger_arns and monitoring_minutes is None:
            return None

        configuration: Dict[str, Any] = {}
        if trigger_arns:
            configuration["RollbackTriggers"] = [
                {"Arn": arn.strip(), "Type": ROLLBACK_TRIGGER_TYPE}
                for arn in trigger_arns
            ]
        if monitoring_minutes is not None:
            configuration["MonitoringTimeInMinutes"] = monitoring_minutes
        return configuration

    def stack_params(self) -> Dict[str, Any]:
        """Build create_stack arguments, leaving out absent values."""
        self.validate()
        template_body, template_url = self.load_template()

        params: Dict[str, Any] = {
            "StackName": self.name,
            "Capabilities": parse_capabilities(self.capabilities),
            "RoleARN": parse_string(self.role_arn),
            "NotificationARNs": parse_arns(self.notification_arns),
            "DisableRollback": self.disable_rollback,
            "TimeoutInMinutes": parse_number(self.timeout_in_minutes),
            "TemplateBody": template_body,
            "TemplateURL": template_url,
            "Tags": parse_tags(self.tags),
            "EnableTerminationProtection": self.termination_protection,
            "ResourceTypes": parse_capabilities(self.resource_types) or None,
            "RollbackConfiguration": self.rollback_configuration(),
        }

        if self.parameter_overrides:
            params["Parameters"] = parse_parameters(self.parameter_overrides.strip())

        return {key: value for key, value in params.items() if value is not None}

    def link_shortener(self) -> Optional[LinkShortener]:
        """Shortener for change set links, or None without a token."""
        if not self.shortener_token:
            return None
        return LinkShortener(
            self.shortener_token,
            api_url=self.shortener_url,
            domain=self.shortener_domain,
        )


def load_config_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Load and validate a YAML deployment configuration file."""
    config_file = Path(path)
    if not config_file.exists():
        raise ConfigurationError(f"Configuration file not found: {config_file}")

    with open(config_file, "r") as f:
        data = yaml.safe_load(f) or {}

    try:
        validate(instance=data, schema=CONFIG_SCHEMA)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {config_file}: {e.message}") from e

    return data


def load_deploy_config(
    config_file: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> DeployConfig:
    """Merge an optional config file with explicit overrides.

    Overrides whose value is None (or an empty string, which is what an
    unset CI input looks like) do not replace values from the file.
    """
    data: Dict[str, Any] = load_config_file(config_file) if config_file else {}
    data = {key.replace("-", "_"): value for key, value in data.items()}

    for key, value in (overrides or {}).items():
        if value is None or value == "":
            continue
        data[key.replace("-", "_")] = value

    if not data.get("region"):
        data["region"] = os.environ.get("AWS_REGION") or os.environ.get(
            "AWS_DEFAULT_REGION"
        )

    return DeployConfig.from_dict(data)
