#!/usr/bin/env python3
"""
CloudFormation deployment CLI commands.

Options also read the GitHub Actions ``INPUT_<NAME>`` variables, so the same
commands work from a workflow step and from a terminal.
"""

import json
import logging
import os
import sys
import uuid
from typing import Any, Optional

import click

from cloudformation import StackManager, gen_cfn_url
from cloudformation.links import BITLY_API_URL, BITLY_DOMAIN, LinkShortener
from config import load_deploy_config

logger = logging.getLogger(__name__)


def set_output(name: str, value: str) -> None:
    """Publish a step output, or echo it when not running in a workflow."""
    output_file = os.environ.get("GITHUB_OUTPUT")
    if not output_file:
        click.echo(f"{name}={value}")
        return

    with open(output_file, "a", encoding="utf-8") as f:
        if "\n" in value:
            delimiter = f"ghadelimiter_{uuid.uuid4()}"
            f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
        else:
            f.write(f"{name}={value}\n")


def _input(name: str, help_text: str, **kwargs: Any) -> Any:
    """Option bound to an action input of the same name."""
    return click.option(
        f"--{name}", envvar=f"INPUT_{name.upper()}", help=help_text, **kwargs
    )


@click.group()
def main() -> None:
    """CloudFormation stack deployment commands."""
    pass


@main.command()
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    envvar="INPUT_CONFIG",
    help="YAML file with deployment inputs",
)
@_input("name", "CloudFormation stack name")
@_input("template", "Template path, or an https URL to the template")
@_input("capabilities", "Comma-separated capabilities")
@_input("parameter-overrides", "Comma-separated Key=Value parameters")
@_input("no-execute-changeset", "Create the change set without executing it")
@_input("no-delete-failed-changeset", "Keep change sets that failed to create")
@_input("no-fail-on-empty-changeset", "Succeed when there is nothing to change")
@_input("disable-rollback", "Disable rollback of a failed stack creation")
@_input("timeout-in-minutes", "Stack creation timeout")
@_input("notification-arns", "Comma-separated SNS topic ARNs")
@_input("role-arn", "Role CloudFormation assumes for the stack")
@_input("tags", "JSON tags for the stack")
@_input("termination-protection", "Enable termination protection")
@_input("resource-types", "Comma-separated resource types allowed")
@_input("rollback-monitoring-minutes", "Rollback trigger monitoring period")
@_input("rollback-trigger-arns", "Comma-separated CloudWatch alarm ARNs")
@click.option("--region", help="AWS region")
@click.option("--profile", help="AWS profile to use")
@click.option(
    "--workspace",
    envvar="GITHUB_WORKSPACE",
    help="Directory relative template paths are resolved against",
)
@click.option(
    "--shortener-token",
    envvar="BITLY_TOKEN",
    help="Bearer token for shortening change set links",
)
def deploy(config_file: Optional[str], **options: Any) -> None:
    """Create or update a CloudFormation stack."""
    try:
        config = load_deploy_config(config_file, options)

        manager = StackManager(
            region=config.region,
            profile=config.profile,
            link_shortener=config.link_shortener(),
        )

        stack_id = manager.deploy_stack(
            config.stack_params(),
            no_empty_change_set=config.no_fail_on_empty_changeset,
            no_execute_change_set=config.no_execute_changeset,
            no_delete_failed_change_set=config.no_delete_failed_changeset,
        )
        set_output("stack-id", stack_id or "UNKNOWN")

        if stack_id:
            for key, value in manager.get_stack_outputs(stack_id).items():
                set_output(key, value)

    except Exception as e:
        logger.debug("Deployment failed", exc_info=True)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.option("--stack-name", "-s", required=True, help="CloudFormation stack name or id")
@click.option("--region", envvar="AWS_REGION", help="AWS region")
@click.option("--profile", help="AWS profile to use")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def outputs(stack_name: str, region: Optional[str], profile: Optional[str], output_json: bool) -> None:
    """Show the outputs of a stack."""
    try:
        manager = StackManager(region=region, profile=profile)
        stack_outputs = manager.get_stack_outputs(stack_name)

        if output_json:
            click.echo(json.dumps(stack_outputs, indent=2))
            return

        if not stack_outputs:
            click.echo(f"No outputs found for stack {stack_name}")
            return

        for key, value in stack_outputs.items():
            click.echo(f"{key}: {value}")

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.option("--stack-id", required=True, help="Stack id (ARN)")
@click.option("--change-set-id", required=True, help="Change set id (ARN)")
@click.option("--region", envvar="AWS_REGION", default="us-east-1", help="AWS region")
@click.option("--shortener-token", envvar="BITLY_TOKEN", help="Bearer token for the link shortener")
@click.option("--shortener-url", default=BITLY_API_URL, show_default=True)
@click.option("--shortener-domain", default=BITLY_DOMAIN, show_default=True)
def link(
    stack_id: str,
    change_set_id: str,
    region: str,
    shortener_token: Optional[str],
    shortener_url: str,
    shortener_domain: str,
) -> None:
    """Print a console link to a change set."""
    try:
        shortener = None
        if shortener_token:
            shortener = LinkShortener(
                shortener_token, api_url=shortener_url, domain=shortener_domain
            )
        click.echo(gen_cfn_url(region, stack_id, change_set_id, shortener))

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
