from __future__ import annotations

import json
from datetime import datetime, timezone

import pydantic
import pytest

from nlb.core.domain.models import (
    CONFIG_TYPES,
    Backend,
    FrontendConfig,
    HealthCheck,
    Message,
    Metadata,
    Service,
    SharedHTTPConfig,
    TCPConfig,
    config_type_for,
    decode_message,
    decode_service,
    register_config_type,
)
from nlb.core.errors import DecodeError, UnsupportedTypeError


def _tcp_config() -> TCPConfig:
    return TCPConfig(
        method="least_conn",
        ports=[80, 443],
        backends={
            "hostname1.example.com": Backend(addrs=["10.3.2.43", "2001:700:f00d::8"]),
            "hostname2.example.com": Backend(addrs=["10.3.2.53"]),
        },
        upstream_max_conns=100,
        acl=["10.10.20.0/24", "2001:700:1337::/48"],
        health_check=HealthCheck(port=1337, send="healthz\n", expect="^OK$"),
        frontend="foobar",
    )


def test_tcp_config_omits_empty_fields() -> None:
    config = TCPConfig(method="least_conn", ports=[80, 443], acl=["10.10.20.0/24"])

    encoded = config.to_json()

    assert encoded == '{"method":"least_conn","ports":[80,443],"acl":["10.10.20.0/24"]}'
    for key in ("backends", "health_check", "frontend", "upstream_max_conns"):
        assert key not in json.loads(encoded)


def test_message_round_trip_through_both_decode_phases() -> None:
    created = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    message = Message.from_config(_tcp_config(), metadata=Metadata(name="web", created_at=created))

    decoded = decode_message(message.to_json())

    assert decoded == message
    assert decoded.type == "tcp"
    assert decoded.metadata.created_at == created
    assert decoded.metadata.updated_at is None
    assert decoded.decode_config() == _tcp_config()


def test_first_phase_keeps_config_raw() -> None:
    message = decode_message(b'{"type":"frontend","config":{"addresses":["10.40.50.23"]}}')

    assert message.config == {"addresses": ["10.40.50.23"]}


def test_empty_envelope_fields_are_omitted() -> None:
    message = Message(type="frontend", metadata=Metadata(name="fe"))

    assert message.to_wire() == {"type": "frontend", "metadata": {"name": "fe"}}


def test_absent_fields_decode_to_zero_values() -> None:
    message = decode_message('{"type":"tcp"}')

    assert message.metadata == Metadata()
    assert message.decode_config() == TCPConfig()


@pytest.mark.parametrize("tag", ["", "udp", "FRONTEND", "http"])
def test_unknown_type_fails_closed(tag: str) -> None:
    message = Message(type=tag, config={"addresses": ["10.0.0.1"]})

    with pytest.raises(UnsupportedTypeError) as excinfo:
        message.decode_config()

    assert excinfo.value.tag == tag
    assert isinstance(excinfo.value, DecodeError)


def test_config_not_matching_its_type_is_a_decode_error() -> None:
    message = decode_message('{"type":"frontend","config":{"addresses":["not-an-ip"]}}')

    with pytest.raises(DecodeError):
        message.decode_config()


def test_invalid_json_is_a_decode_error() -> None:
    with pytest.raises(DecodeError):
        decode_message(b'{"type": ')


def test_addresses_accept_both_families_and_encode_canonically() -> None:
    config = FrontendConfig(addresses=["10.40.50.23", "2001:0700:fffd:0000::0023"])

    assert config.to_wire() == {"addresses": ["10.40.50.23", "2001:700:fffd::23"]}


def test_port_out_of_range_is_rejected() -> None:
    with pytest.raises(pydantic.ValidationError):
        TCPConfig(ports=[70000])


def test_backend_accepts_capitalized_addrs_key() -> None:
    config = TCPConfig.model_validate({"backends": {"h1": {"Addrs": ["10.0.0.1"]}}})

    assert [str(a) for a in config.backends["h1"].addrs] == ["10.0.0.1"]
    assert config.to_wire() == {"backends": {"h1": {"addrs": ["10.0.0.1"]}}}


def test_zero_timestamp_decodes_as_unset() -> None:
    message = decode_message(
        '{"metadata":{"name":"fe","created_at":"0001-01-01T00:00:00Z","updated_at":"2024-05-01T10:00:00Z"}}'
    )

    assert message.metadata.created_at is None
    assert message.metadata.updated_at == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
    assert "created_at" not in message.to_wire()["metadata"]


def test_shared_http_keeps_protocol_sections_raw() -> None:
    message = decode_message(
        json.dumps(
            {
                "type": "shared_http",
                "config": {
                    "names": ["site-a.example.com"],
                    "backend_protocols": "both",
                    "http": {"redirect_https": True, "backend_port": 8080},
                },
            }
        )
    )

    config = message.decode_config()

    assert isinstance(config, SharedHTTPConfig)
    assert config.http == {"redirect_https": True, "backend_port": 8080}
    assert config.https is None


def test_registered_config_type_is_used_for_dispatch() -> None:
    class UDPConfig(TCPConfig):
        pass

    register_config_type("udp-test", UDPConfig)
    try:
        assert config_type_for("udp-test") is UDPConfig
        message = Service.from_config(UDPConfig(ports=[53]), metadata=Metadata(name="dns"))
        assert message.type == "udp-test"
        assert isinstance(message, Service)
    finally:
        CONFIG_TYPES.pop("udp-test", None)


def test_service_decodes_ingress() -> None:
    service = decode_service(
        '{"type":"frontend","metadata":{"name":"fe"},"ingress":[{"ip":"192.0.2.10","hostname":"fe.example.com"}]}'
    )

    assert str(service.ingress[0].ip) == "192.0.2.10"
    assert service.ingress[0].hostname == "fe.example.com"
    assert service.name == "fe"
