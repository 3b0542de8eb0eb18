from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from bunkerweb import Ban, BanKey, BanRequest, Config, ConfigKey, ValidationError, derive_service_id
from bunkerweb.models.entities import JobItem, ServiceUpdate


@pytest.mark.parametrize(
    ("server_name", "expected"),
    [
        ("app.example.com www.example.com", "app.example.com"),
        ("My_Site.Example", "my-site.example"),
        ("  spaced.example  ", "spaced.example"),
        ("ünïcode!@#", "ncode"),
        ("", "service"),
        ("!!!", "service"),
    ],
)
def test_derive_service_id(server_name: str, expected: str) -> None:
    assert derive_service_id(server_name) == expected


# =============================================================================
# ConfigKey
# =============================================================================


@pytest.mark.parametrize("service", [None, "", "  ", "global", "GLOBAL", " Global "])
def test_config_key_global_scope_normalizes(service: str | None) -> None:
    key = ConfigKey(service, "http", "app.conf")
    assert key.service == "global"
    assert key.is_global
    assert key == ConfigKey("global", "http", "app.conf")
    assert hash(key) == hash(ConfigKey(None, "http", "app.conf"))


def test_config_key_segments_always_have_three_parts() -> None:
    assert ConfigKey(None, "http", "a.conf").segments == ("global", "http", "a.conf")
    assert ConfigKey("app", "http", "a.conf").segments == ("app", "http", "a.conf")


def test_config_key_payload_omits_global_service() -> None:
    assert ConfigKey("GLOBAL", "http", "a.conf").to_payload() == {"type": "http", "name": "a.conf"}
    assert ConfigKey("app", "http", "a.conf").to_payload() == {
        "type": "http",
        "name": "a.conf",
        "service": "app",
    }


def test_config_key_trims_type_and_name() -> None:
    key = ConfigKey(" app ", " http ", " a.conf ")
    assert key.segments == ("app", "http", "a.conf")
    assert key == ConfigKey("app", "http", "a.conf")
    assert hash(key) == hash(ConfigKey("app", "http", "a.conf"))
    assert key.to_payload() == {"type": "http", "name": "a.conf", "service": "app"}


def test_config_key_string_round_trip() -> None:
    key = ConfigKey("app", "server_http", "x.conf")
    assert str(key) == "app/server_http/x.conf"
    assert ConfigKey.parse(str(key)) == key
    assert ConfigKey.parse("/http/x.conf") == ConfigKey(None, "http", "x.conf")


@pytest.mark.parametrize("identifier", ["http/x.conf", "a/b/c/d", "app//x.conf", "app/http/"])
def test_config_key_parse_rejects_malformed(identifier: str) -> None:
    with pytest.raises(ValidationError):
        ConfigKey.parse(identifier)


def test_config_key_moved_changes_only_given_segments() -> None:
    key = ConfigKey(None, "http", "primary")
    moved = key.moved(service="backend", type="stream")
    assert moved == ConfigKey("backend", "stream", "primary")
    assert moved != key
    assert key.moved(service="GLOBAL") == key


def test_config_model_defaults_to_global_scope() -> None:
    cfg = Config.model_validate({"type": "http", "name": "a.conf", "data": "x"})
    assert cfg.service == "global"
    assert cfg.key == ConfigKey(None, "http", "a.conf")
    assert Config.model_validate({"service": "", "type": "t", "name": "n"}).service == "global"


# =============================================================================
# BanKey
# =============================================================================


def test_ban_key_has_no_global_fallback() -> None:
    assert BanKey("10.0.0.1") != BanKey("10.0.0.1", "frontend")
    assert BanKey("10.0.0.1", "  ") == BanKey("10.0.0.1")
    assert BanKey("10.0.0.1", "global").service == "global"


def test_ban_key_string_round_trip() -> None:
    assert str(BanKey("10.0.0.1")) == "10.0.0.1"
    assert str(BanKey("10.0.0.1", "frontend")) == "10.0.0.1/frontend"
    assert BanKey.parse("10.0.0.1/frontend") == BanKey(" 10.0.0.1 ", "frontend")
    assert BanKey.parse("10.0.0.1") == BanKey("10.0.0.1")


@pytest.mark.parametrize("identifier", ["", "/frontend", "a/b/c"])
def test_ban_key_parse_rejects_malformed(identifier: str) -> None:
    with pytest.raises(ValidationError):
        BanKey.parse(identifier)


def test_ban_key_payload() -> None:
    assert BanKey("10.0.0.1").to_payload() == {"ip": "10.0.0.1"}
    assert BanKey("10.0.0.1", "frontend").to_payload() == {"ip": "10.0.0.1", "service": "frontend"}


def test_ban_model() -> None:
    ban = Ban.model_validate({"ip": "10.0.0.2", "service": "", "reason": "api", "exp": None})
    assert ban.service is None
    assert ban.exp == 0
    assert ban.is_permanent
    assert ban.key == BanKey("10.0.0.2")


def test_ban_request_payload_omits_unset_fields() -> None:
    assert BanRequest(ip="10.0.0.2").to_payload() == {"ip": "10.0.0.2"}
    assert BanRequest(ip="10.0.0.1", service="frontend", reason="abuse", exp=3600).to_payload() == {
        "ip": "10.0.0.1",
        "service": "frontend",
        "reason": "abuse",
        "exp": 3600,
    }


@pytest.mark.parametrize("kwargs", [{"ip": "  "}, {"ip": "10.0.0.1", "exp": -1}])
def test_ban_request_validation(kwargs: dict) -> None:
    with pytest.raises(PydanticValidationError):
        BanRequest(**kwargs)


def test_job_item_requires_plugin() -> None:
    assert JobItem(plugin="reporter").to_payload() == {"plugin": "reporter"}
    with pytest.raises(PydanticValidationError):
        JobItem(plugin=" ")


def test_update_models_send_only_set_fields() -> None:
    assert ServiceUpdate(is_draft=False).to_payload() == {"is_draft": False}
    assert ServiceUpdate().to_payload() == {}
