"""Thin helpers over TCP sockets, and a ``Socket`` that owns one."""

from __future__ import annotations

import errno
import socket
import struct
import sys
from typing import NoReturn, Optional, Tuple

from reactorkit.inet_address import InetAddress
from reactorkit.logger import FatalLogError, Logger, LogLevel, log, log_syserr

_EXPECTED_ACCEPT_ERRORS = frozenset(
    {
        errno.EAGAIN,
        errno.EWOULDBLOCK,
        errno.ECONNABORTED,
        errno.EINTR,
        errno.EPROTO,
        errno.EPERM,
        errno.EMFILE,
    }
)

_UNEXPECTED_ACCEPT_ERRORS = frozenset(
    {
        errno.EBADF,
        errno.EFAULT,
        errno.EINVAL,
        errno.ENFILE,
        errno.ENOBUFS,
        errno.ENOMEM,
        errno.ENOTSOCK,
        errno.EOPNOTSUPP,
    }
)

_TCP_INFO_SIZE = 104
_TCP_INFO_FORMAT = "8B24I"


def _die(exc: OSError, message: str) -> NoReturn:
    """Log ``message`` at FATAL with the errno of ``exc`` and raise ``FatalLogError``."""
    frame = sys._getframe(1)
    logger = Logger(
        frame.f_code.co_filename, frame.f_lineno, LogLevel.FATAL, None, exc.errno or 0
    )
    logger.stream() << message
    try:
        logger.finish()
    except FatalLogError as fatal:
        raise fatal from exc
    raise FatalLogError(message) from exc


def create_nonblocking(family: int) -> socket.socket:
    """Create a non-blocking, close-on-exec TCP socket; FATAL on failure."""
    try:
        sock = socket.socket(family, socket.SOCK_STREAM, socket.IPPROTO_TCP)
    except OSError as exc:
        _die(exc, "sockets.create_nonblocking")
    sock.setblocking(False)
    return sock


def bind_or_die(sock: socket.socket, addr: InetAddress) -> None:
    try:
        sock.bind(addr.sockaddr())
    except OSError as exc:
        _die(exc, "sockets.bind_or_die")


def listen_or_die(sock: socket.socket) -> None:
    try:
        sock.listen(socket.SOMAXCONN)
    except OSError as exc:
        _die(exc, "sockets.listen_or_die")


def accept(sock: socket.socket) -> Tuple[socket.socket, InetAddress]:
    """Accept one connection as a non-blocking socket with its peer address.

    Expected failures such as ``EAGAIN`` are logged and re-raised; anything
    else is FATAL.
    """
    try:
        conn, peer = sock.accept()
    except OSError as exc:
        log_syserr("Socket.accept")
        saved = exc.errno
        if saved in _EXPECTED_ACCEPT_ERRORS:
            raise
        if saved in _UNEXPECTED_ACCEPT_ERRORS:
            _die(exc, "unexpected error of accept %d" % saved)
        _die(exc, "unknown error of accept %s" % saved)
    conn.setblocking(False)
    return conn, InetAddress.from_sockaddr(conn.family, peer)


def connect(sock: socket.socket, addr: InetAddress) -> int:
    """Start connecting; return 0 or the errno value, like ``connect_ex``."""
    return sock.connect_ex(addr.sockaddr())


def close(sock: socket.socket) -> None:
    try:
        sock.close()
    except OSError:
        log_syserr("sockets.close")


def shutdown_write(sock: socket.socket) -> None:
    try:
        sock.shutdown(socket.SHUT_WR)
    except OSError:
        log_syserr("sockets.shutdown_write")


def get_socket_error(sock: socket.socket) -> int:
    """Return the pending ``SO_ERROR`` of ``sock``, or the errno of the query."""
    try:
        return sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
    except OSError as exc:
        return exc.errno or 0


def _unspecified(sock: socket.socket) -> InetAddress:
    return InetAddress(0, False, sock.family == socket.AF_INET6)


def get_local_addr(sock: socket.socket) -> InetAddress:
    try:
        return InetAddress.from_sockaddr(sock.family, sock.getsockname())
    except OSError:
        log_syserr("sockets.get_local_addr")
        return _unspecified(sock)


def get_peer_addr(sock: socket.socket) -> InetAddress:
    try:
        return InetAddress.from_sockaddr(sock.family, sock.getpeername())
    except OSError:
        log_syserr("sockets.get_peer_addr")
        return _unspecified(sock)


def is_self_connect(sock: socket.socket) -> bool:
    """Whether ``sock`` is connected to its own local address and port."""
    local = get_local_addr(sock)
    peer = get_peer_addr(sock)
    if local.family() not in (socket.AF_INET, socket.AF_INET6):
        return False
    return (
        local.family() == peer.family()
        and local.to_port() == peer.to_port()
        and local.to_ip() == peer.to_ip()
    )


class Socket:
    """Owns a socket and closes it when done."""

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock

    def fd(self) -> int:
        return self._sock.fileno()

    def bind_address(self, addr: InetAddress) -> None:
        """Bind to ``addr``; FATAL if that fails."""
        bind_or_die(self._sock, addr)

    def listen(self) -> None:
        """Start listening; FATAL if that fails."""
        listen_or_die(self._sock)

    def accept(self) -> Tuple[socket.socket, InetAddress]:
        return accept(self._sock)

    def shutdown_write(self) -> None:
        shutdown_write(self._sock)

    def _set_flag(self, level: int, option: int, on: bool) -> None:
        self._sock.setsockopt(level, option, 1 if on else 0)

    def set_tcp_no_delay(self, on: bool) -> None:
        self._set_flag(socket.IPPROTO_TCP, socket.TCP_NODELAY, on)

    def set_reuse_addr(self, on: bool) -> None:
        self._set_flag(socket.SOL_SOCKET, socket.SO_REUSEADDR, on)

    def set_reuse_port(self, on: bool) -> None:
        option = getattr(socket, "SO_REUSEPORT", None)
        if option is None:
            if on:
                log(LogLevel.ERROR, "SO_REUSEPORT is not supported.")
            return
        try:
            self._set_flag(socket.SOL_SOCKET, option, on)
        except OSError:
            if on:
                log_syserr("SO_REUSEPORT failed.")

    def set_keep_alive(self, on: bool) -> None:
        self._set_flag(socket.SOL_SOCKET, socket.SO_KEEPALIVE, on)

    def tcp_info_string(self) -> Optional[str]:
        """Summarise the kernel's ``TCP_INFO``, or ``None`` when unavailable."""
        option = getattr(socket, "TCP_INFO", None)
        if option is None:
            return None
        try:
            raw = self._sock.getsockopt(socket.IPPROTO_TCP, option, _TCP_INFO_SIZE)
        except OSError:
            return None
        raw = raw.ljust(_TCP_INFO_SIZE, b"\0")[:_TCP_INFO_SIZE]
        fields = struct.unpack(_TCP_INFO_FORMAT, raw)
        bytes_part, words = fields[:8], fields[8:]
        return (
            "unrecovered=%u rto=%u ato=%u snd_mss=%u rcv_mss=%u "
            "lost=%u retrans=%u rtt=%u rttvar=%u "
            "sshthresh=%u cwnd=%u total_retrans=%u"
            % (
                bytes_part[2],
                words[0],
                words[1],
                words[2],
                words[3],
                words[6],
                words[7],
                words[15],
                words[16],
                words[17],
                words[18],
                words[23],
            )
        )

    def close(self) -> None:
        close(self._sock)

    def __enter__(self) -> Socket:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()