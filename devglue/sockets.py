"""TCP and Unix domain socket helpers with timeouts and non-blocking connects."""

from __future__ import annotations

import enum
import errno
import ipaddress
import os
import re
import select
import socket
import stat
import sys
from dataclasses import dataclass

from devglue import netif

RECV_TIMEOUT = 20000
SEND_TIMEOUT = 10000
CONNECT_TIMEOUT = 5000

_BACKLOG = 100
_BUFFER_SIZE = 0x20000
_MAX_TIMEOUT_MS = 2**31 - 1
_LEADING_INT = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")
_IN_PROGRESS = {
    code
    for code in (
        errno.EINPROGRESS,
        errno.EWOULDBLOCK,
        errno.EAGAIN,
        getattr(errno, "WSAEWOULDBLOCK", None),
    )
    if code is not None
}


@dataclass
class _Settings:
    verbose: int = 0


_settings = _Settings()


class FdMode(enum.Enum):
    """What to wait for on a socket."""

    READ = enum.auto()
    WRITE = enum.auto()
    EXCEPT = enum.auto()


class _PollStatus(enum.Enum):
    SUCCESS = enum.auto()
    TIMEOUT = enum.auto()
    ERROR = enum.auto()


def _log(level: int, message: str) -> None:
    if _settings.verbose >= level:
        sys.stderr.write(f"[socket] {message}\n")


def init_from_env() -> None:
    """Set the verbosity from the SOCKET_DEBUG environment variable, if set."""
    value = os.environ.get("SOCKET_DEBUG")
    if value is not None:
        match = _LEADING_INT.match(value)
        _settings.verbose = int(match.group(1)) if match else 0


def set_verbose(level: int) -> None:
    """Set how much diagnostic output is written to standard error."""
    _settings.verbose = int(level)


def _flag(name: str) -> int:
    return getattr(select, name, 0)


if hasattr(select, "poll"):
    _POLL_EVENTS = {
        FdMode.READ: _flag("POLLRDNORM") | _flag("POLLRDBAND") | select.POLLIN
        | select.POLLHUP | select.POLLERR,
        FdMode.WRITE: _flag("POLLWRBAND") | _flag("POLLWRNORM") | select.POLLOUT | select.POLLERR,
        FdMode.EXCEPT: select.POLLPRI,
    }

    def _poll(fd: int, mode: FdMode, timeout_ms: int) -> _PollStatus:
        poller = select.poll()
        poller.register(fd, _POLL_EVENTS[mode])
        try:
            ready = poller.poll(timeout_ms if timeout_ms >= 0 else None)
        except OSError as exc:
            _log(2, f"poll failed: {exc.strerror}")
            return _PollStatus.ERROR
        if not ready:
            return _PollStatus.TIMEOUT
        revents = ready[0][1]
        if revents & (select.POLLNVAL | select.POLLERR):
            _log(2, f"poll unexpected events: {revents}")
            return _PollStatus.ERROR
        return _PollStatus.SUCCESS

else:

    def _poll(fd: int, mode: FdMode, timeout_ms: int) -> _PollStatus:
        timeout = timeout_ms / 1000 if timeout_ms > 0 else None
        sets: list[list[int]] = [[], [], []]
        index = {FdMode.READ: 0, FdMode.WRITE: 1, FdMode.EXCEPT: 2}[mode]
        sets[index].append(fd)
        try:
            ready = select.select(*sets, timeout)
        except OSError as exc:
            _log(2, f"select failed: {exc.strerror}")
            return _PollStatus.ERROR
        return _PollStatus.SUCCESS if ready[index] else _PollStatus.TIMEOUT


def _fileno(sock) -> int:
    return sock if isinstance(sock, int) else sock.fileno()


def _os_error(code: int) -> OSError:
    return OSError(code, os.strerror(code))


def _set_nosigpipe(sock: socket.socket) -> None:
    option = getattr(socket, "SO_NOSIGPIPE", None)
    if option is not None:
        sock.setsockopt(socket.SOL_SOCKET, option, 1)


def _tune(sock: socket.socket, nodelay: bool) -> None:
    options = [
        (socket.SOL_SOCKET, socket.SO_SNDBUF, _BUFFER_SIZE, "send buffer"),
        (socket.SOL_SOCKET, socket.SO_RCVBUF, _BUFFER_SIZE, "receive buffer"),
    ]
    if nodelay:
        options.insert(0, (socket.IPPROTO_TCP, socket.TCP_NODELAY, 1, "TCP_NODELAY"))
    for level, option, value, label in options:
        try:
            sock.setsockopt(level, option, value)
        except OSError as exc:
            _log(1, f"Could not set {label} on socket: {exc.strerror}")


def _connect_nonblocking(sock: socket.socket, sockaddr) -> None:
    """Connect ``sock`` (left non-blocking) within CONNECT_TIMEOUT or raise."""
    sock.setblocking(False)
    err = sock.connect_ex(sockaddr)
    if err == 0:
        return
    if err not in _IN_PROGRESS:
        raise _os_error(err)
    status = _poll(sock.fileno(), FdMode.WRITE, CONNECT_TIMEOUT)
    so_error = sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
    if status is _PollStatus.SUCCESS and so_error == 0:
        return
    if so_error:
        raise _os_error(so_error)
    raise _os_error(errno.ETIMEDOUT)


def addr_to_string(family: int, address) -> str:
    """Return the numeric text form of an IPv4 or IPv6 address.

    ``address`` may be packed bytes, text, an ipaddress object or a sockaddr tuple.
    """
    if family not in (socket.AF_INET, socket.AF_INET6):
        raise _os_error(errno.EAFNOSUPPORT)
    if isinstance(address, tuple):
        address = address[0]
    if isinstance(address, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        packed = address.packed
    elif isinstance(address, str):
        packed = socket.inet_pton(family, address.split("%", 1)[0])
    else:
        packed = bytes(address)
    return socket.inet_ntop(family, packed)


def create_unix(filename: str) -> socket.socket:
    """Create a listening Unix domain socket at ``filename``, replacing any old one."""
    try:
        os.unlink(filename)
    except OSError:
        pass
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        _set_nosigpipe(sock)
        sock.bind(filename)
        sock.listen(_BACKLOG)
    except OSError as exc:
        _log(1, f"create_unix: {exc.strerror}")
        sock.close()
        raise
    return sock


def connect_unix(filename: str) -> socket.socket:
    """Connect to the Unix domain socket at ``filename``; the result is non-blocking."""
    try:
        mode = os.stat(filename).st_mode
    except OSError as exc:
        _log(2, f"connect_unix: stat '{filename}': {exc.strerror}")
        raise
    if not stat.S_ISSOCK(mode):
        _log(2, f"connect_unix: File '{filename}' is not a socket!")
        raise OSError(errno.ENOTSOCK, f"{filename!r} is not a socket")
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        _tune(sock, nodelay=False)
        _set_nosigpipe(sock)
        _connect_nonblocking(sock, filename)
    except OSError as exc:
        _log(2, f"connect_unix: connect: {exc.strerror}")
        sock.close()
        raise
    return sock


def create(addr: str | None, port: int) -> socket.socket:
    """Create a listening TCP socket bound to ``addr`` (None for any) and ``port``."""
    try:
        infos = socket.getaddrinfo(
            addr, str(port), socket.AF_UNSPEC, socket.SOCK_STREAM, socket.IPPROTO_TCP,
            socket.AI_PASSIVE | socket.AI_NUMERICSERV,
        )
    except socket.gaierror as exc:
        _log(1, f"create: getaddrinfo: {exc.strerror}")
        raise
    last_error: OSError | None = None
    for family, socktype, proto, _, sockaddr in infos:
        try:
            sock = socket.socket(family, socktype, proto)
        except OSError as exc:
            last_error = exc
            continue
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            _set_nosigpipe(sock)
            if family == socket.AF_INET6 and hasattr(socket, "IPV6_V6ONLY"):
                try:
                    sock.setsockopt(socket.IPPROTO_IPV6, socket.IPV6_V6ONLY, 1 if addr else 0)
                except OSError as exc:
                    _log(1, f"setsockopt() IPV6_V6ONLY: {exc.strerror}")
            sock.bind(sockaddr)
            sock.listen(_BACKLOG)
        except OSError as exc:
            _log(1, f"create: {exc.strerror}")
            sock.close()
            last_error = exc
            continue
        return sock
    raise last_error or OSError(errno.EADDRNOTAVAIL, f"cannot listen on {addr}:{port}")


def _ipv6_target(address) -> tuple[str, int]:
    scope = 0
    if isinstance(address, tuple):
        if len(address) >= 4:
            scope = address[3]
        address = address[0]
    if isinstance(address, ipaddress.IPv6Address):
        zone = address.scope_id
        host = str(ipaddress.IPv6Address(address.packed))
    elif isinstance(address, str):
        host, _, zone = address.partition("%")
    else:
        host, zone = socket.inet_ntop(socket.AF_INET6, bytes(address)), None
    if zone:
        if zone.isdigit():
            scope = int(zone)
        else:
            try:
                scope = socket.if_nametoindex(zone)
            except OSError:
                scope = 0
    return host, scope


def connect_addr(family: int, address, port: int) -> socket.socket:
    """Connect over TCP to ``address`` of the given family and ``port``.

    For link- or site-scoped IPv6 addresses a suitable local scope id is chosen.
    """
    if family == socket.AF_INET:
        host = addr_to_string(family, address)
        sockaddr: tuple = (host, port)
    elif family == socket.AF_INET6:
        host, scope = _ipv6_target(address)
        resolved = netif.sockaddr_in6_scope_id(host, scope)
        sockaddr = (host, port, 0, resolved if resolved is not None else 0)
    else:
        _log(1, "ERROR: Unsupported address family")
        raise _os_error(errno.EAFNOSUPPORT)

    sock = socket.socket(family, socket.SOCK_STREAM, socket.IPPROTO_TCP)
    try:
        _set_nosigpipe(sock)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        _connect_nonblocking(sock, sockaddr)
    except OSError:
        sock.close()
        _log(2, f"connect_addr: Could not connect to {host} port {port}")
        raise
    _tune(sock, nodelay=True)
    return sock


def connect(addr: str, port: int) -> socket.socket:
    """Connect over TCP to host ``addr`` and ``port``; the result is non-blocking."""
    try:
        infos = socket.getaddrinfo(
            addr, str(port), socket.AF_UNSPEC, socket.SOCK_STREAM, socket.IPPROTO_TCP,
            socket.AI_NUMERICSERV,
        )
    except socket.gaierror as exc:
        _log(1, f"connect: getaddrinfo: {exc.strerror}")
        raise
    last_error: OSError | None = None
    for family, socktype, proto, _, sockaddr in infos:
        try:
            sock = socket.socket(family, socktype, proto)
        except OSError as exc:
            last_error = exc
            continue
        try:
            _set_nosigpipe(sock)
        except OSError:
            sock.close()
            raise
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            _connect_nonblocking(sock, sockaddr)
        except OSError as exc:
            sock.close()
            last_error = exc
            continue
        _tune(sock, nodelay=True)
        return sock
    _log(2, f"connect: Could not connect to {addr}:{port}")
    raise last_error or OSError(errno.ECONNREFUSED, f"could not connect to {addr}:{port}")


def check_fd(sock, mode: FdMode, timeout: int) -> bool:
    """Wait until ``sock`` is ready for ``mode``; a timeout of 0 waits forever.

    Raises TimeoutError on timeout and ConnectionResetError on failure.
    """
    if timeout < 0:
        raise ValueError("timeout must not be negative")
    fd = _fileno(sock)
    if fd < 0:
        _log(2, f"ERROR: invalid fd in check_fd {fd}")
        raise _os_error(errno.EINVAL)
    timeout_ms = timeout if 0 < timeout <= _MAX_TIMEOUT_MS else -1
    status = _poll(fd, mode, timeout_ms)
    if status is _PollStatus.SUCCESS:
        return True
    if status is _PollStatus.TIMEOUT:
        raise _os_error(errno.ETIMEDOUT)
    _log(2, "check_fd: poll failed")
    raise _os_error(errno.ECONNRESET)


def accept(sock: socket.socket) -> socket.socket:
    """Accept one connection on a listening socket and return it."""
    conn, _ = sock.accept()
    return conn


def shutdown(sock: socket.socket, how: int) -> None:
    """Shut down reading, writing or both on ``sock``."""
    sock.shutdown(how)


def close(sock: socket.socket) -> None:
    """Close ``sock``."""
    sock.close()


def receive_timeout(sock: socket.socket, length: int, flags: int, timeout: int) -> bytes:
    """Receive up to ``length`` bytes, waiting at most ``timeout`` ms for data.

    A closed peer raises ConnectionResetError.
    """
    check_fd(sock, FdMode.READ, timeout)
    data = sock.recv(length, flags)
    if not data:
        _log(3, f"receive_timeout: fd={_fileno(sock)} recv returned 0")
        raise _os_error(errno.ECONNRESET)
    return data


def receive(sock: socket.socket, length: int) -> bytes:
    """Receive up to ``length`` bytes with the default receive timeout."""
    return receive_timeout(sock, length, 0, RECV_TIMEOUT)


def peek(sock: socket.socket, length: int) -> bytes:
    """Look at up to ``length`` pending bytes without consuming them."""
    return receive_timeout(sock, length, socket.MSG_PEEK, RECV_TIMEOUT)


def send(sock: socket.socket, data) -> int:
    """Send ``data`` once the socket is writable; return the number of bytes sent."""
    check_fd(sock, FdMode.WRITE, SEND_TIMEOUT)
    flags = getattr(socket, "MSG_NOSIGNAL", 0)
    return sock.send(data, flags)


def get_socket_port(sock: socket.socket) -> int:
    """Return the local port a TCP socket is bound to."""
    name = sock.getsockname()
    if not isinstance(name, tuple):
        raise _os_error(errno.EAFNOSUPPORT)
    return name[1]