"""
CloudFormation stack deployment utilities.
"""

from .exceptions import ChangeSetError, DeployError, LinkShortenerError, TemplateError
from .links import LinkShortener, console_url, gen_cfn_url
from .stack_manager import StackManager

__all__ = [
    "StackManager",
    "LinkShortener",
    "console_url",
    "gen_cfn_url",
    "DeployError",
    "ChangeSetError",
    "LinkShortenerError",
    "TemplateError",
]
