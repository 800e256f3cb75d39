#!/usr/bin/env python3
"""Main CLI entry point for cfn-deploy."""

import logging

import click

from .cloudformation import deploy, link, outputs


@click.group()
@click.version_option(package_name="cfn-deploy")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Deploy CloudFormation stacks through change sets.

    \b
    Examples:
      cfn-deploy deploy --name my-stack --template template.yaml
      cfn-deploy deploy --config deploy.yaml --no-execute-changeset 1
      cfn-deploy outputs --stack-name my-stack --json
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    # botocore debug output drowns out the deployment steps
    logging.getLogger("botocore").setLevel(logging.WARNING)


cli.add_command(deploy)
cli.add_command(outputs)
cli.add_command(link)


if __name__ == "__main__":
    cli()
