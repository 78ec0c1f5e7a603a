"""
Proxy fallback for origins that block direct downloads.

A policy table maps origin host families to a third-party retrieval proxy.
Only a NetworkError carrying one of the policy's trigger statuses (403 for
Pinterest) is retried, and only once.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, FrozenSet, List, Optional, TypeVar
from urllib.parse import quote

from .config import PROXY_SERVICE_URL, PROXY_TIMEOUT
from .errors import LookAnalystError, NetworkError, ProxyError
from .hosts import is_pinterest_host

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass(frozen=True)
class ProxyPolicy:
    """Fallback behaviour for one origin host family."""
    name: str
    matches: Callable[[str], bool]
    service_url: str
    timeout: float = PROXY_TIMEOUT
    trigger_statuses: FrozenSet[int] = field(default_factory=lambda: frozenset({403}))

    def proxied_url(self, url: str) -> str:
        return f"{self.service_url}?url={quote(url, safe='')}"

    def applies_to(self, url: str, error: Exception) -> bool:
        return (
            isinstance(error, NetworkError)
            and error.status_code in self.trigger_statuses
            and self.matches(url)
        )


PROXY_POLICIES: List[ProxyPolicy] = [
    ProxyPolicy(name='pinterest', matches=is_pinterest_host, service_url=PROXY_SERVICE_URL),
]


def find_proxy_policy(
    url: str,
    error: Exception,
    policies: Optional[List[ProxyPolicy]] = None,
) -> Optional[ProxyPolicy]:
    """Return the first policy that should retry URL after error, if any."""
    for policy in (PROXY_POLICIES if policies is None else policies):
        if policy.applies_to(url, error):
            return policy
    return None


def with_proxy_fallback(
    url: str,
    attempt: Callable[[str, Optional[ProxyPolicy]], T],
    policies: Optional[List[ProxyPolicy]] = None,
) -> T:
    """
    Run attempt(url, None); on a matching rejection retry through the proxy.

    The retry calls attempt(proxied_url, policy) so the caller can pick the
    proxy timeout and headers.

    Raises:
        ProxyError: If the proxy retry fails too. Wraps both failures.
        LookAnalystError: Any failure that no policy covers, unchanged.
    """
    try:
        return attempt(url, None)
    except NetworkError as original:
        policy = find_proxy_policy(url, original, policies)
        if policy is None:
            raise

        logger.warning(
            "Direct fetch of %s rejected (%s), retrying via %s proxy",
            url, original.status_code, policy.name,
        )
        try:
            return attempt(policy.proxied_url(url), policy)
        except LookAnalystError as proxy_failure:
            raise ProxyError(original, proxy_failure) from proxy_failure
