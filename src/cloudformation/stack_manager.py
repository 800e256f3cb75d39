"""
CloudFormation stack management operations.
"""

import logging
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import ClientError, WaiterError

from .exceptions import ChangeSetError
from .links import LinkShortener, gen_cfn_url

logger = logging.getLogger(__name__)

# Status reasons CloudFormation reports for a change set with nothing to do.
EMPTY_CHANGE_SET_REASONS = (
    "No updates are to be performed",
    "The submitted information didn't contain changes",
)

# create_stack arguments that carry over to create_change_set.
CHANGE_SET_KEYS = (
    "StackName",
    "TemplateBody",
    "TemplateURL",
    "Parameters",
    "Capabilities",
    "ResourceTypes",
    "RoleARN",
    "RollbackConfiguration",
    "NotificationARNs",
    "Tags",
)


def change_set_name(stack_name: str) -> str:
    """Name of the change set used to update ``stack_name``."""
    return f"{stack_name}-CS"


def build_change_set(params: Dict[str, Any]) -> Dict[str, Any]:
    """Build create_change_set arguments from create_stack arguments."""
    change_set = {"ChangeSetName": change_set_name(params["StackName"])}
    for key in CHANGE_SET_KEYS:
        if params.get(key) is not None:
            change_set[key] = params[key]
    return change_set


class StackManager:
    """Manage CloudFormation stack operations."""

    def __init__(
        self,
        region: Optional[str] = None,
        profile: Optional[str] = None,
        link_shortener: Optional[LinkShortener] = None,
    ):
        """
        Initialize stack manager.

        Args:
            region: AWS region
            profile: AWS profile to use
            link_shortener: Shortener for change set console links
        """
        self.region = region or "us-east-1"
        self.profile = profile
        self.link_shortener = link_shortener

        # Initialize AWS client
        session_args = {"region_name": self.region}
        if profile:
            session_args["profile_name"] = profile

        session = boto3.Session(**session_args)
        self.cloudformation = session.client("cloudformation")

    def get_stack(self, stack_name: str) -> Optional[Dict[str, Any]]:
        """Describe a stack by name or id, returning None if it does not exist."""
        try:
            response = self.cloudformation.describe_stacks(StackName=stack_name)
        except ClientError as e:
            error = e.response.get("Error", {})
            if error.get("Code") == "ValidationError" and "does not exist" in str(
                error.get("Message", "")
            ):
                return None
            raise

        stacks = response.get("Stacks") or []
        return stacks[0] if stacks else None

    def get_stack_outputs(self, stack_name: str) -> Dict[str, str]:
        """Get outputs from a CloudFormation stack."""
        outputs: Dict[str, str] = {}
        stack = self.get_stack(stack_name)
        if not stack:
            return outputs

        for output in stack.get("Outputs", []):
            key = output.get("OutputKey")
            value = output.get("OutputValue")
            if key and value:
                outputs[key] = value
        return outputs

    def deploy_stack(
        self,
        params: Dict[str, Any],
        no_empty_change_set: bool = False,
        no_execute_change_set: bool = False,
        no_delete_failed_change_set: bool = False,
    ) -> Optional[str]:
        """Create the stack, or update it through a change set if it exists.

        Args:
            params: create_stack arguments
            no_empty_change_set: Treat a change set without changes as success
            no_execute_change_set: Create the change set but do not execute it
            no_delete_failed_change_set: Keep change sets that failed to create

        Returns:
            The stack id, or None if CloudFormation did not report one
        """
        stack_name = params["StackName"]
        stack = self.get_stack(stack_name)

        if not stack:
            logger.info(f"Creating CloudFormation stack {stack_name}")
            response = self.cloudformation.create_stack(**params)

            logger.info("Waiting for CloudFormation stack creation")
            waiter = self.cloudformation.get_waiter("stack_create_complete")
            waiter.wait(StackName=stack_name)

            return response.get("StackId")

        return self.update_stack(
            stack,
            build_change_set(params),
            no_empty_change_set,
            no_execute_change_set,
            no_delete_failed_change_set,
        )

    def update_stack(
        self,
        stack: Dict[str, Any],
        change_set: Dict[str, Any],
        no_empty_change_set: bool = False,
        no_execute_change_set: bool = False,
        no_delete_failed_change_set: bool = False,
    ) -> Optional[str]:
        """Update an existing stack through a change set."""
        logger.info("Creating CloudFormation change set")
        response = self.cloudformation.create_change_set(**change_set)

        try:
            logger.info("Waiting for CloudFormation change set creation")
            waiter = self.cloudformation.get_waiter("change_set_create_complete")
            waiter.wait(
                ChangeSetName=change_set["ChangeSetName"],
                StackName=change_set["StackName"],
            )
        except WaiterError as e:
            logger.info(str(e))
            return self.cleanup_change_set(
                stack, change_set, no_empty_change_set, no_delete_failed_change_set
            )

        if no_execute_change_set:
            logger.info("Change set created")
            logger.info(
                gen_cfn_url(
                    self.region,
                    stack["StackId"],
                    response["Id"],
                    self.link_shortener,
                )
            )
            logger.debug("Not executing the change set")
            return stack["StackId"]

        logger.debug("Executing CloudFormation change set")
        self.cloudformation.execute_change_set(
            ChangeSetName=change_set["ChangeSetName"],
            StackName=change_set["StackName"],
        )

        logger.debug("Updating CloudFormation stack")
        waiter = self.cloudformation.get_waiter("stack_update_complete")
        waiter.wait(StackName=stack["StackId"])

        return stack["StackId"]

    def cleanup_change_set(
        self,
        stack: Dict[str, Any],
        change_set: Dict[str, Any],
        no_empty_change_set: bool = False,
        no_delete_failed_change_set: bool = False,
    ) -> Optional[str]:
        """Handle a change set whose creation did not complete.

        A FAILED change set is deleted unless ``no_delete_failed_change_set``
        is set. If it failed only because there was nothing to change and
        ``no_empty_change_set`` is set, the stack id is returned; otherwise
        ChangeSetError is raised with the reason CloudFormation gave.
        """
        status = self.cloudformation.describe_change_set(
            ChangeSetName=change_set["ChangeSetName"],
            StackName=change_set["StackName"],
        )

        if status.get("Status") != "FAILED":
            return None

        reason = status.get("StatusReason") or ""

        if not no_delete_failed_change_set:
            logger.debug("Deleting failed change set")
            self.cloudformation.delete_change_set(
                ChangeSetName=change_set["ChangeSetName"],
                StackName=change_set["StackName"],
            )

        if no_empty_change_set and any(
            message in reason for message in EMPTY_CHANGE_SET_REASONS
        ):
            logger.info("Change set contains no changes")
            return stack.get("StackId")

        raise ChangeSetError(change_set["ChangeSetName"], status.get("StatusReason"))
