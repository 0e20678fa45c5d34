"""Unit tests for the configuration model and JSON loader."""

import json
from pathlib import Path

import pytest

from horusec_admin.domain.configuration import (
    DEFAULT_AUTH_TYPE,
    Auth,
    Configuration,
    Keycloak,
    KeycloakReactApp,
    Manager,
    load_configuration,
)
from horusec_admin.domain.errors import ConfigurationLoadError

FULL_CONFIGURATION = {
    "auth": {
        "type": "keycloak",
        "keycloak": {
            "base_path": "http://keycloak.local:8080",
            "client_id": "horusec-private",
            "client_secret": "s3cr3t",
            "realm": "master",
            "otp": True,
            "react_app": {
                "client_id": "horusec-public",
                "realm": "master",
                "base_path": "http://keycloak.local:8080",
            },
        },
    },
    "manager": {
        "account_endpoint": "http://account.local:8003",
        "analytic_endpoint": "http://analytic.local:8005",
        "api_endpoint": "http://api.local:8000",
        "auth_endpoint": "http://auth.local:8006",
        "manager_endpoint": "http://manager.local:8043",
    },
}


def test_from_mapping_builds_full_tree():
    configuration = Configuration.from_mapping(FULL_CONFIGURATION)

    assert configuration == Configuration(
        auth=Auth(
            type="keycloak",
            keycloak=Keycloak(
                base_path="http://keycloak.local:8080",
                client_id="horusec-private",
                client_secret="s3cr3t",
                realm="master",
                otp=True,
                react_app=KeycloakReactApp(
                    client_id="horusec-public",
                    realm="master",
                    base_path="http://keycloak.local:8080",
                ),
            ),
        ),
        manager=Manager(
            account_endpoint="http://account.local:8003",
            analytic_endpoint="http://analytic.local:8005",
            api_endpoint="http://api.local:8000",
            auth_endpoint="http://auth.local:8006",
            manager_endpoint="http://manager.local:8043",
        ),
    )


def test_from_mapping_treats_missing_and_null_branches_as_absent():
    assert Configuration.from_mapping({}) == Configuration()
    assert Configuration.from_mapping({"auth": None, "manager": None}) == Configuration()
    configuration = Configuration.from_mapping({"auth": {"keycloak": {"react_app": None}}})
    assert configuration.auth.type == DEFAULT_AUTH_TYPE
    assert configuration.auth.keycloak.react_app is None


@pytest.mark.parametrize(
    "data",
    [
        {"auth": "keycloak"},
        {"manager": ["http://api.local"]},
        {"auth": {"keycloak": 1}},
        {"manager": {"api_endpoint": 8000}},
        {"auth": {"keycloak": {"otp": "false"}}},
        {"auth": {"keycloak": {"otp": 1}}},
    ],
)
def test_from_mapping_rejects_wrong_shapes(data):
    with pytest.raises(ConfigurationLoadError):
        Configuration.from_mapping(data)


def test_load_configuration_reads_json_file(tmp_path: Path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(FULL_CONFIGURATION), encoding="utf-8")

    configuration = load_configuration(path)

    assert configuration.manager.api_endpoint == "http://api.local:8000"
    assert configuration.auth.keycloak.react_app.client_id == "horusec-public"


def test_load_configuration_missing_file(tmp_path: Path):
    with pytest.raises(ConfigurationLoadError, match="failed to read"):
        load_configuration(tmp_path / "missing.json")


def test_load_configuration_invalid_json(tmp_path: Path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigurationLoadError, match="failed to decode") as excinfo:
        load_configuration(path)

    assert isinstance(excinfo.value.__cause__, json.JSONDecodeError)


def test_load_configuration_requires_object(tmp_path: Path):
    path = tmp_path / "config.json"
    path.write_text("[]", encoding="utf-8")

    with pytest.raises(ConfigurationLoadError, match="JSON object"):
        load_configuration(path)


@pytest.mark.parametrize("raw, expected", [(True, True), (False, False), (None, False)])
def test_otp_accepts_json_booleans(raw, expected):
    configuration = Configuration.from_mapping({"auth": {"keycloak": {"otp": raw}}})
    assert configuration.auth.keycloak.otp is expected


def test_otp_string_is_rejected():
    with pytest.raises(ConfigurationLoadError, match="'otp' must be a boolean"):
        Configuration.from_mapping({"auth": {"keycloak": {"otp": "false"}}})
