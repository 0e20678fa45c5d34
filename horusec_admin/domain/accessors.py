"""Derived, read-only views over a configuration tree."""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import SplitResult

from horusec_admin.domain.configuration import (
    DEFAULT_AUTH_TYPE,
    Configuration,
    Keycloak,
    KeycloakReactApp,
)
from horusec_admin.domain.errors import MalformedURLError
from horusec_admin.domain.urls import parse_url


@dataclass(frozen=True)
class ManagerEndpoints:
    """All manager endpoints, parsed."""

    account: SplitResult
    analytic: SplitResult
    api: SplitResult
    auth: SplitResult
    manager: SplitResult


class ConfigurationResolver:
    """Resolves endpoint URLs and auth settings from a possibly partial configuration.

    An absent branch resolves to ``None``. A present manager branch with an
    unparsable endpoint raises ``MalformedURLError``, so "not deployed" and
    "misconfigured" stay distinguishable.
    """

    def __init__(self, configuration: Configuration) -> None:
        self._configuration = configuration

    @property
    def configuration(self) -> Configuration:
        return self._configuration

    def resolve_keycloak(self) -> Optional[Keycloak]:
        """Return the Keycloak settings when both auth and keycloak are configured."""
        auth = self._configuration.auth
        if auth is None:
            return None
        return auth.keycloak

    def resolve_keycloak_react_app(self) -> Optional[KeycloakReactApp]:
        """Return the frontend Keycloak settings when the whole chain is configured."""
        keycloak = self.resolve_keycloak()
        if keycloak is None:
            return None
        return keycloak.react_app

    def _resolve_endpoint(self, field: str, attribute: str) -> Optional[SplitResult]:
        """Parse one manager endpoint; ``None`` when the manager branch is absent."""
        manager = self._configuration.manager
        if manager is None:
            return None

        try:
            return parse_url(getattr(manager, attribute))
        except ValueError as error:
            raise MalformedURLError(field, error) from error

    def resolve_account_url(self) -> Optional[SplitResult]:
        """Return the account service base URL."""
        return self._resolve_endpoint("Account", "account_endpoint")

    def resolve_analytic_url(self) -> Optional[SplitResult]:
        """Return the analytic service base URL."""
        return self._resolve_endpoint("Analytic", "analytic_endpoint")

    def resolve_api_url(self) -> Optional[SplitResult]:
        """Return the API service base URL."""
        return self._resolve_endpoint("API", "api_endpoint")

    def resolve_auth_url(self) -> Optional[SplitResult]:
        """Return the auth service base URL."""
        return self._resolve_endpoint("Auth", "auth_endpoint")

    def resolve_manager_url(self) -> Optional[SplitResult]:
        """Return the manager frontend base URL."""
        return self._resolve_endpoint("Manager", "manager_endpoint")

    def resolve_endpoints(self) -> Optional[ManagerEndpoints]:
        """Resolve every manager endpoint, stopping at the first malformed one."""
        if self._configuration.manager is None:
            return None
        return ManagerEndpoints(
            account=self.resolve_account_url(),
            analytic=self.resolve_analytic_url(),
            api=self.resolve_api_url(),
            auth=self.resolve_auth_url(),
            manager=self.resolve_manager_url(),
        )

    def resolve_auth_type(self) -> str:
        """Return the auth type, with the built-in default normalized to ``""``."""
        auth = self._configuration.auth
        if auth is None or auth.type == DEFAULT_AUTH_TYPE:
            return ""
        return auth.type
