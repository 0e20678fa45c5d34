"""Configuration tree consumed by the admin backend."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from horusec_admin.domain.errors import ConfigurationLoadError

DEFAULT_AUTH_TYPE = "horusec"


def _branch(data: Mapping[str, Any], key: str) -> Optional[Mapping[str, Any]]:
    """Return the nested mapping at ``key``; missing or null means absent."""
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise ConfigurationLoadError(
            f"configuration branch {key!r} must be an object, got {type(value).__name__}"
        )
    return value


def _string(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key, "")
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ConfigurationLoadError(
            f"configuration field {key!r} must be a string, got {type(value).__name__}"
        )
    return value


def _boolean(data: Mapping[str, Any], key: str) -> bool:
    value = data.get(key, False)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ConfigurationLoadError(
            f"configuration field {key!r} must be a boolean, got {type(value).__name__}"
        )
    return value


@dataclass(frozen=True)
class KeycloakReactApp:
    """Keycloak settings handed to the web frontend."""

    client_id: str = ""
    realm: str = ""
    base_path: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "KeycloakReactApp":
        return cls(
            client_id=_string(data, "client_id"),
            realm=_string(data, "realm"),
            base_path=_string(data, "base_path"),
        )


@dataclass(frozen=True)
class Keycloak:
    """Keycloak server settings used by the backend."""

    base_path: str = ""
    client_id: str = ""
    client_secret: str = ""
    realm: str = ""
    otp: bool = False
    react_app: Optional[KeycloakReactApp] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Keycloak":
        react_app = _branch(data, "react_app")
        return cls(
            base_path=_string(data, "base_path"),
            client_id=_string(data, "client_id"),
            client_secret=_string(data, "client_secret"),
            realm=_string(data, "realm"),
            otp=_boolean(data, "otp"),
            react_app=(
                KeycloakReactApp.from_mapping(react_app)
                if react_app is not None
                else None
            ),
        )


@dataclass(frozen=True)
class Auth:
    type: str = DEFAULT_AUTH_TYPE
    keycloak: Optional[Keycloak] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Auth":
        keycloak = _branch(data, "keycloak")
        return cls(
            type=_string(data, "type") or DEFAULT_AUTH_TYPE,
            keycloak=Keycloak.from_mapping(keycloak) if keycloak is not None else None,
        )


@dataclass(frozen=True)
class Manager:
    """Base URLs of the services the manager frontend talks to."""

    account_endpoint: str = ""
    analytic_endpoint: str = ""
    api_endpoint: str = ""
    auth_endpoint: str = ""
    manager_endpoint: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Manager":
        return cls(
            account_endpoint=_string(data, "account_endpoint"),
            analytic_endpoint=_string(data, "analytic_endpoint"),
            api_endpoint=_string(data, "api_endpoint"),
            auth_endpoint=_string(data, "auth_endpoint"),
            manager_endpoint=_string(data, "manager_endpoint"),
        )


@dataclass(frozen=True)
class Configuration:
    """Root of the configuration tree; every branch is optional."""

    auth: Optional[Auth] = None
    manager: Optional[Manager] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Configuration":
        auth = _branch(data, "auth")
        manager = _branch(data, "manager")
        return cls(
            auth=Auth.from_mapping(auth) if auth is not None else None,
            manager=Manager.from_mapping(manager) if manager is not None else None,
        )


def load_configuration(path: Union[str, Path]) -> Configuration:
    """Read a JSON configuration file into a ``Configuration``."""
    target = Path(path)
    try:
        raw = target.read_text(encoding="utf-8")
    except OSError as error:
        raise ConfigurationLoadError(
            f"failed to read configuration {target}: {error}"
        ) from error

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as error:
        raise ConfigurationLoadError(
            f"failed to decode configuration {target}: {error}"
        ) from error

    if not isinstance(data, Mapping):
        raise ConfigurationLoadError(
            f"configuration {target} must contain a JSON object"
        )
    return Configuration.from_mapping(data)
