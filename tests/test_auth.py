from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from utils import auth


@pytest.fixture
def credential_classes(monkeypatch) -> dict[str, MagicMock]:
    classes = {}
    for name in (
        "DefaultAzureCredential",
        "AzureCliCredential",
        "ClientSecretCredential",
        "InteractiveBrowserCredential",
    ):
        classes[name] = MagicMock(name=name)
        monkeypatch.setattr(auth, name, classes[name])
    return classes


def test_default_and_cli_need_no_file(credential_classes) -> None:
    auth.get_credentials("default", None)
    auth.get_credentials("cli", None)

    credential_classes["DefaultAzureCredential"].assert_called_once_with()
    credential_classes["AzureCliCredential"].assert_called_once_with()


def test_service_principal_from_json_file(tmp_path, credential_classes) -> None:
    path = tmp_path / "sp.json"
    path.write_text(
        json.dumps({"tenant_id": "t", "client_id": "c", "client_secret": "s"}),
        encoding="utf-8",
    )

    auth.get_credentials("service", str(path))

    credential_classes["ClientSecretCredential"].assert_called_once_with(
        tenant_id="t", client_id="c", client_secret="s"
    )


def test_service_principal_requires_all_fields(tmp_path, credential_classes) -> None:
    path = tmp_path / "sp.json"
    path.write_text(json.dumps({"tenant_id": "t"}), encoding="utf-8")

    with pytest.raises(ValueError) as excinfo:
        auth.get_credentials("service", str(path))
    assert "client_id" in str(excinfo.value)


def test_service_principal_requires_file(credential_classes) -> None:
    with pytest.raises(FileNotFoundError):
        auth.get_credentials("service", None)


def test_user_login_passes_optional_ids(tmp_path, credential_classes) -> None:
    path = tmp_path / "app.json"
    path.write_text(json.dumps({"tenant_id": "t", "client_id": "c"}), encoding="utf-8")

    auth.get_credentials("user", str(path))

    credential_classes["InteractiveBrowserCredential"].assert_called_once_with(
        tenant_id="t", client_id="c"
    )


def test_unknown_method_raises(credential_classes) -> None:
    with pytest.raises(ValueError):
        auth.get_credentials("adc", None)
