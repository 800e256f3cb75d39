"""
Console deep links for CloudFormation change sets.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from .exceptions import LinkShortenerError

logger = logging.getLogger(__name__)

CONSOLE_URL = "https://console.aws.amazon.com/cloudformation/home"
BITLY_API_URL = "https://api-ssl.bitly.com/v4/shorten"
BITLY_DOMAIN = "bit.ly"


def _encode_component(value: str) -> str:
    """Percent-encode a value for use inside a query string."""
    return quote(value, safe="-_.!~*'()")


def console_url(region: str, stack_id: str, change_set_id: str) -> str:
    """Build the console URL showing the changes of a change set."""
    pieces = [
        CONSOLE_URL,
        f"?region={region}#/stacks/changesets/changes",
        f"?stackId={_encode_component(stack_id)}",
        f"&changeSetId={_encode_component(change_set_id)}",
    ]
    return "".join(pieces)


class LinkShortener:
    """Client for a Bitly compatible link shortening API."""

    def __init__(
        self,
        token: str,
        api_url: str = BITLY_API_URL,
        domain: str = BITLY_DOMAIN,
        timeout: int = 30,
    ):
        """
        Initialize link shortener.

        Args:
            token: Bearer token sent with every request
            api_url: Shorten endpoint
            domain: Domain the short link is created under
            timeout: Request timeout in seconds
        """
        self.token = token
        self.api_url = api_url
        self.domain = domain
        self.timeout = timeout

    def shorten(self, long_url: str) -> str:
        """Return the short link for ``long_url``."""
        headers = {"Authorization": f"Bearer {self.token}"}
        data = {"long_url": long_url, "domain": self.domain}

        try:
            response = requests.post(
                self.api_url, json=data, headers=headers, timeout=self.timeout
            )
            response.raise_for_status()
            body: Dict[str, Any] = response.json()
        except (requests.RequestException, ValueError) as e:
            raise LinkShortenerError(f"Failed to shorten link: {e}") from e

        if "link" not in body:
            raise LinkShortenerError("Link shortener response has no 'link' field")

        logger.debug(f"Shortened {long_url} to {body['link']}")
        return str(body["link"])


def gen_cfn_url(
    region: str,
    stack_id: str,
    change_set_id: str,
    shortener: Optional[LinkShortener],
) -> str:
    """Build a shareable link to a change set.

    The console URL is shortened when a shortener is configured; a failing
    shortener raises LinkShortenerError rather than falling back.
    """
    url = console_url(region, stack_id, change_set_id)
    if shortener is None:
        return url
    return shortener.shorten(url)
