import logging
from dataclasses import dataclass
from typing import Tuple
from urllib.parse import urlsplit

from fastapi import Request

from proxy_backend.app_proxy.urls import parse_target_url

logger = logging.getLogger("uvicorn.error")


@dataclass(frozen=True)
class HostAllowlist:
    """Hostnames the proxy is permitted to fetch.

    An empty allowlist is permissive: every host is allowed. That mode is
    meant for local development only.
    """

    hosts: Tuple[str, ...] = ()

    @classmethod
    def from_csv(cls, raw: str) -> "HostAllowlist":
        hosts = []
        for entry in (raw or "").split(","):
            entry = entry.strip()
            if entry and entry not in hosts:
                hosts.append(entry)
        return cls(tuple(hosts))

    @property
    def permissive(self) -> bool:
        return not self.hosts

    def is_allowed(self, hostname: str) -> bool:
        if self.permissive:
            return True
        return hostname in self.hosts

    def is_url_allowed(self, url: str) -> bool:
        """Check the hostname of ``url``; anything but an http(s) URL with a host is refused."""
        target = parse_target_url(url)
        if target is None:
            return False
        return self.is_allowed(urlsplit(target).hostname)


def get_allowlist(request: Request) -> HostAllowlist:
    """FastAPI dependency returning the allowlist loaded at startup."""
    return request.app.state.allowlist


def log_allowlist_mode(allowlist: HostAllowlist) -> None:
    if allowlist.permissive:
        logger.warning(
            "[Proxy] ALLOWED_HOSTS is empty, every host may be fetched. "
            "Do not run this configuration in production."
        )
    else:
        logger.info(f"[Proxy] Allowed hosts: {', '.join(allowlist.hosts)}")
