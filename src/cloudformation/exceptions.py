"""
Errors raised while deploying CloudFormation stacks.
"""

from typing import Optional


class DeployError(Exception):
    """Base class for deployment failures."""


class ChangeSetError(DeployError):
    """Raised when a change set could not be created."""

    def __init__(self, change_set_name: str, reason: Optional[str] = None):
        self.change_set_name = change_set_name
        self.reason = reason
        super().__init__(f"Failed to create Change Set: {reason}")


class LinkShortenerError(DeployError):
    """Raised when the link shortening service call fails."""


class TemplateError(DeployError):
    """Raised when the stack template cannot be loaded."""
