"""
hosting.py

Responsibility: Isolate all direct hosting-provider REST API interaction.

This module must be the only place that:
- Constructs provider REST endpoints
- Sends HTTP requests to api.github.com / gitee.com
- Interprets provider API responses / error payloads

Providers register themselves by kind; the bootstrapper only ever talks to
the `HostingProvider` surface and looks adapters up with `create_provider`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import requests

from gitpub.errors import ConfigurationError, ProviderError


@dataclass(frozen=True)
class UserInfo:
    login: str
    name: str = ""


@dataclass(frozen=True)
class OrgInfo:
    login: str


@dataclass(frozen=True)
class RepoInfo:
    owner: str
    name: str
    html_url: str
    ssh_url: str
    default_branch: str


_REGISTRY: dict[str, type["HostingProvider"]] = {}


def register_provider(kind: str) -> Callable[[type["HostingProvider"]], type["HostingProvider"]]:
    def decorator(cls: type[HostingProvider]) -> type[HostingProvider]:
        cls.kind = kind
        _REGISTRY[kind] = cls
        return cls

    return decorator


def provider_kinds() -> list[str]:
    return list(_REGISTRY)


def create_provider(kind: str | None) -> "HostingProvider":
    cls = _REGISTRY.get(kind or "")
    if cls is None:
        raise ConfigurationError(
            f"No hosting provider registered for {kind!r} (available: {', '.join(provider_kinds())})"
        )
    return cls()


class HostingProvider:
    """Capability surface every provider adapter implements."""

    kind = ""
    display_name = ""
    api_base = ""
    timeout = 30

    def __init__(self, api_base: str | None = None) -> None:
        self._token = ""
        if api_base is not None:
            self.api_base = api_base.rstrip("/")

    def set_token(self, token: str) -> None:
        if not token.strip():
            raise ProviderError(f"{self.display_name} token is required.")
        self._token = token.strip()

    def _headers(self) -> dict[str, str]:
        return {"User-Agent": "gitpub"}

    def _params(self) -> dict[str, str]:
        return {}

    def _request(self, method: str, path: str, *, json_body: dict[str, Any] | None = None) -> Any:
        url = f"{self.api_base}{path}"
        r = requests.request(
            method,
            url,
            headers=self._headers(),
            params=self._params(),
            json=json_body,
            timeout=self.timeout,
        )
        if r.status_code >= 400:
            try:
                payload = r.json()
            except ValueError:
                payload = {"message": r.text}
            message = payload.get("message", payload) if isinstance(payload, dict) else payload
            raise ProviderError(
                f"{self.display_name} API error {r.status_code} {method} {path}: {message}",
                status_code=r.status_code,
            )
        if r.status_code == 204 or not r.content:
            return None
        return r.json()

    def _repo_info(self, data: dict[str, Any], owner: str, name: str) -> RepoInfo:
        return RepoInfo(
            owner=owner,
            name=name,
            html_url=data.get("html_url") or "",
            ssh_url=data.get("ssh_url") or self.get_remote_url(owner, name),
            default_branch=data.get("default_branch") or "main",
        )

    def get_user(self) -> UserInfo | None:
        data = self._request("GET", "/user")
        if not data or not data.get("login"):
            return None
        return UserInfo(login=str(data["login"]), name=str(data.get("name") or ""))

    def get_orgs(self, login: str) -> list[OrgInfo] | None:
        raise NotImplementedError

    def get_repo(self, login: str, name: str) -> RepoInfo | None:
        """
        Return RepoInfo if the repo exists and is accessible; otherwise None.
        """
        try:
            data = self._request("GET", f"/repos/{login}/{name}")
        except ProviderError as e:
            if e.status_code == 404:
                return None
            raise
        if not data:
            return None
        return self._repo_info(data, login, name)

    def create_repo(self, name: str) -> RepoInfo | None:
        data = self._request("POST", "/user/repos", json_body=self._create_body(name))
        if not data:
            return None
        owner = (data.get("owner") or {}).get("login") or ""
        return self._repo_info(data, owner, name)

    def create_org_repo(self, name: str, login: str) -> RepoInfo | None:
        data = self._request("POST", f"/orgs/{login}/repos", json_body=self._create_body(name))
        if not data:
            return None
        return self._repo_info(data, login, name)

    def _create_body(self, name: str) -> dict[str, Any]:
        return {"name": name}

    def get_remote_url(self, login: str, name: str) -> str:
        raise NotImplementedError

    def get_token_url(self) -> str:
        raise NotImplementedError


@register_provider("github")
class GitHubProvider(HostingProvider):
    display_name = "GitHub"
    api_base = "https://api.github.com"

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self._token}",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "gitpub",
        }

    def get_orgs(self, login: str) -> list[OrgInfo] | None:
        data = self._request("GET", "/user/orgs")
        if data is None:
            return None
        return [OrgInfo(login=str(item["login"])) for item in data]

    def _create_body(self, name: str) -> dict[str, Any]:
        return {"name": name, "auto_init": False}

    def get_remote_url(self, login: str, name: str) -> str:
        return f"git@github.com:{login}/{name}.git"

    def get_token_url(self) -> str:
        return "https://github.com/settings/tokens"


@register_provider("gitee")
class GiteeProvider(HostingProvider):
    display_name = "Gitee"
    api_base = "https://gitee.com/api/v5"

    # Gitee v5 takes the token as a query parameter.
    def _params(self) -> dict[str, str]:
        return {"access_token": self._token}

    def get_orgs(self, login: str) -> list[OrgInfo] | None:
        data = self._request("GET", f"/users/{login}/orgs")
        if data is None:
            return None
        return [OrgInfo(login=str(item["login"])) for item in data]

    def get_remote_url(self, login: str, name: str) -> str:
        return f"git@gitee.com:{login}/{name}.git"

    def get_token_url(self) -> str:
        return "https://gitee.com/personal_access_tokens"
