import socket
from unittest import mock

import pytest

from reactorkit.inet_address import InetAddress


def test_any_address():
    addr = InetAddress(1234)
    assert addr.to_ip() == "0.0.0.0"
    assert addr.to_ip_port() == "0.0.0.0:1234"
    assert addr.to_port() == 1234
    assert addr.family() == socket.AF_INET


def test_loopback_address():
    addr = InetAddress(4321, True)
    assert addr.to_ip() == "127.0.0.1"
    assert addr.to_ip_port() == "127.0.0.1:4321"
    assert addr.to_port() == 4321


def test_from_ip_port():
    addr = InetAddress.from_ip_port("1.2.3.4", 8888)
    assert addr.to_ip() == "1.2.3.4"
    assert addr.to_ip_port() == "1.2.3.4:8888"
    assert addr.to_port() == 8888


def test_from_ip_port_edge_values():
    addr = InetAddress.from_ip_port("255.254.253.252", 65535)
    assert addr.to_ip_port() == "255.254.253.252:65535"


def test_ipv6_addresses():
    any6 = InetAddress(1234, False, True)
    assert any6.to_ip() == "::"
    assert any6.to_ip_port() == ":::1234"
    assert any6.family() == socket.AF_INET6
    assert InetAddress(1234, True, True).to_ip() == "::1"


def test_ipv6_text_is_normalized():
    addr = InetAddress.from_ip_port("::0001", 80, ipv6=True)
    assert addr.to_ip() == "::1"


def test_invalid_ip_raises():
    with pytest.raises(ValueError):
        InetAddress.from_ip_port("1.2.3", 80)
    with pytest.raises(ValueError):
        InetAddress.from_ip_port("1.2.3.4", 80, ipv6=True)


def test_port_out_of_range_raises():
    with pytest.raises(ValueError):
        InetAddress(70000)


def test_network_byte_order():
    addr = InetAddress.from_ip_port("1.2.3.4", 8888)
    assert addr.port_net_endian() == socket.htons(8888)
    host_order = int.from_bytes(socket.inet_aton("1.2.3.4"), "big")
    assert addr.ip_net_endian() == socket.htonl(host_order)


def test_ip_net_endian_requires_ipv4():
    with pytest.raises(ValueError):
        InetAddress(80, ipv6=True).ip_net_endian()


def test_sockaddr_round_trip():
    for addr in (
        InetAddress.from_ip_port("10.1.2.3", 99),
        InetAddress.from_ip_port("fe80::1", 443, ipv6=True),
    ):
        assert InetAddress.from_sockaddr(addr.family(), addr.sockaddr()) == addr


def test_bind_with_sockaddr():
    addr = InetAddress(0, True)
    with socket.socket(addr.family(), socket.SOCK_STREAM) as sock:
        sock.bind(addr.sockaddr())
        bound = InetAddress.from_sockaddr(sock.family, sock.getsockname())
    assert bound.to_ip() == addr.to_ip()
    assert bound.to_port() > 0


def test_scope_id_only_for_ipv6():
    v6 = InetAddress(80, ipv6=True)
    v6.scope_id = 3
    assert v6.scope_id == 3
    assert v6.sockaddr()[3] == 3
    v4 = InetAddress(80)
    v4.scope_id = 3
    assert v4.scope_id == 0


def test_resolve_keeps_port():
    addr = InetAddress(8080)
    with mock.patch("socket.gethostbyname", return_value="10.0.0.7"):
        assert addr.resolve("service.example.com") is True
    assert addr.to_ip_port() == "10.0.0.7:8080"


def test_resolve_failure_leaves_address():
    addr = InetAddress(8080)
    with mock.patch("socket.gethostbyname", side_effect=socket.gaierror("no such host")):
        assert addr.resolve("missing.example.com") is False
    assert addr.to_ip() == "0.0.0.0"


def test_resolve_requires_ipv4():
    with pytest.raises(ValueError):
        InetAddress(80, ipv6=True).resolve("localhost")