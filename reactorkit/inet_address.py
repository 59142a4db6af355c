"""IPv4 and IPv6 endpoint addresses."""

from __future__ import annotations

import socket
import sys
from typing import Tuple, Union

from reactorkit.logger import log_syserr

SockAddr = Union[Tuple[str, int], Tuple[str, int, int, int]]


def _check_port(port: int) -> int:
    port = int(port)
    if not 0 <= port <= 0xFFFF:
        raise ValueError("port out of range: %d" % port)
    return port


def _normalize(family: int, ip: str) -> str:
    try:
        return socket.inet_ntop(family, socket.inet_pton(family, ip))
    except (OSError, ValueError) as exc:
        raise ValueError("invalid address %r" % ip) from exc


class InetAddress:
    """An IP address with a port, as used for binding, connecting and accepting."""

    __slots__ = ("_family", "_ip", "_port", "_flowinfo", "_scope_id")

    def __init__(self, port: int = 0, loopback_only: bool = False, ipv6: bool = False) -> None:
        if ipv6:
            ip = "::1" if loopback_only else "::"
            self._set(socket.AF_INET6, ip, port)
        else:
            ip = "127.0.0.1" if loopback_only else "0.0.0.0"
            self._set(socket.AF_INET, ip, port)

    def _set(self, family: int, ip: str, port: int, flowinfo: int = 0, scope_id: int = 0) -> None:
        self._family = family
        self._ip = ip
        self._port = _check_port(port)
        self._flowinfo = flowinfo
        self._scope_id = scope_id

    @classmethod
    def from_ip_port(cls, ip: str, port: int, ipv6: bool = False) -> InetAddress:
        """Build from a numeric address such as ``1.2.3.4``; raise ``ValueError`` if invalid."""
        family = socket.AF_INET6 if ipv6 else socket.AF_INET
        addr = cls.__new__(cls)
        addr._set(family, _normalize(family, ip), port)
        return addr

    @classmethod
    def from_sockaddr(cls, family: int, sockaddr: SockAddr) -> InetAddress:
        """Build from an address tuple as returned by ``socket.accept`` or ``getsockname``."""
        addr = cls.__new__(cls)
        if family == socket.AF_INET:
            host, port = sockaddr[0], sockaddr[1]
            addr._set(family, _normalize(family, host), port)
        elif family == socket.AF_INET6:
            host, port = sockaddr[0], sockaddr[1]
            flowinfo = sockaddr[2] if len(sockaddr) > 2 else 0
            scope_id = sockaddr[3] if len(sockaddr) > 3 else 0
            host = host.split("%", 1)[0]
            addr._set(family, _normalize(family, host), port, flowinfo, scope_id)
        else:
            raise ValueError("unsupported address family %r" % family)
        return addr

    def family(self) -> int:
        return self._family

    def to_ip(self) -> str:
        return self._ip

    def to_ip_port(self) -> str:
        return "%s:%u" % (self._ip, self._port)

    def to_port(self) -> int:
        return self._port

    def sockaddr(self) -> SockAddr:
        """Return the address tuple accepted by ``socket.bind`` and ``socket.connect``."""
        if self._family == socket.AF_INET6:
            return (self._ip, self._port, self._flowinfo, self._scope_id)
        return (self._ip, self._port)

    def ip_net_endian(self) -> int:
        """Return the IPv4 address as the integer holding it in network byte order."""
        if self._family != socket.AF_INET:
            raise ValueError("not an IPv4 address")
        return int.from_bytes(socket.inet_aton(self._ip), sys.byteorder)

    def port_net_endian(self) -> int:
        """Return the port as the integer holding it in network byte order."""
        return int.from_bytes(self._port.to_bytes(2, "big"), sys.byteorder)

    def resolve(self, hostname: str) -> bool:
        """Replace the IPv4 address with that of ``hostname``; keep the port.

        Returns ``False`` when the name cannot be resolved.
        """
        if self._family != socket.AF_INET:
            raise ValueError("resolve needs an IPv4 address")
        try:
            ip = socket.gethostbyname(hostname)
        except (socket.gaierror, socket.herror):
            return False
        except OSError:
            log_syserr("InetAddress.resolve")
            return False
        self._ip = _normalize(socket.AF_INET, ip)
        return True

    @property
    def scope_id(self) -> int:
        """The IPv6 scope id; setting it on an IPv4 address has no effect."""
        return self._scope_id

    @scope_id.setter
    def scope_id(self, value: int) -> None:
        if self._family == socket.AF_INET6:
            self._scope_id = int(value)

    def _key(self) -> tuple:
        return (self._family, self._ip, self._port, self._flowinfo, self._scope_id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, InetAddress):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return "InetAddress(%r)" % self.to_ip_port()