"""A small TCP transport: one host, one client, raw bytes and length-prefixed strings."""

from __future__ import annotations

import select
import socket
import struct
import threading
from typing import Callable, Optional

DEFAULT_PORT = 2345
DEFAULT_STRING_LIMIT = 400

_LENGTH = struct.Struct("<i")
_ACCEPT_POLL = 0.2


class NetError(Exception):
    """Raised when a network operation fails."""


class Transport:
    """A connection between two players, set up either as host or as client."""

    def __init__(self) -> None:
        self._sock: Optional[socket.socket] = None
        self._listener: Optional[socket.socket] = None
        self._cancel = threading.Event()
        self._waiter: Optional[threading.Thread] = None
        self.is_open = False
        self.is_host = False
        self.last_error = ""

    def __enter__(self) -> Transport:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def connected(self) -> bool:
        return self._sock is not None

    @property
    def port(self) -> Optional[int]:
        """The port the host is listening on, if hosting."""
        if self._listener is None:
            return None
        return self._listener.getsockname()[1]

    def _fail(self, message: str, cause: Optional[BaseException] = None) -> None:
        self.last_error = message
        raise NetError(message) from cause

    def _connection(self) -> socket.socket:
        if self._sock is None:
            self._fail("not connected")
        return self._sock

    def host_setup(self, port: int = DEFAULT_PORT) -> None:
        """Listen for a client on every interface."""
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        except OSError as exc:
            self._fail("cannot open socket", exc)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind(("", port))
            sock.listen(5)
        except OSError as exc:
            sock.close()
            self._fail("cannot bind port", exc)
        self._listener = sock
        self.is_open = True
        self.is_host = True

    def wait_for_client(self) -> None:
        """Block until a client connects."""
        if self._listener is None:
            self._fail("not hosting")
        self._listener.settimeout(None)
        try:
            conn, _ = self._listener.accept()
        except OSError as exc:
            self._fail("Didn't 'accept' properly", exc)
        conn.setblocking(True)
        self._sock = conn

    def wait_for_client_async(
        self, callback: Optional[Callable[[Transport], None]] = None
    ) -> threading.Thread:
        """Accept a client in a background thread, then call `callback(self)`."""
        if self._listener is None:
            self._fail("not hosting")
        self._cancel.clear()
        thread = threading.Thread(target=self._accept_loop, args=(callback,), daemon=True)
        self._waiter = thread
        thread.start()
        return thread

    def _accept_loop(self, callback: Optional[Callable[[Transport], None]]) -> None:
        listener = self._listener
        if listener is None:
            return
        listener.settimeout(_ACCEPT_POLL)
        while not self._cancel.is_set():
            try:
                conn, _ = listener.accept()
            except socket.timeout:
                continue
            except OSError:
                break
            conn.setblocking(True)
            listener.settimeout(None)
            self._sock = conn
            if callback is not None:
                callback(self)
            return
        self.close()

    def cancel_wait(self) -> None:
        """Stop a background wait started by `wait_for_client_async`."""
        self._cancel.set()
        waiter = self._waiter
        if waiter is not None and waiter is not threading.current_thread():
            waiter.join()
        self._waiter = None

    def client_setup(self, ip: str, port: int = DEFAULT_PORT) -> None:
        """Connect to a host."""
        try:
            sock = socket.create_connection((ip, port))
        except OSError as exc:
            self._fail("Error calling connect()", exc)
        sock.setblocking(True)
        self._sock = sock
        self.is_open = True
        self.is_host = False

    def send(self, data: bytes) -> None:
        sock = self._connection()
        try:
            sock.sendall(data)
        except OSError as exc:
            self._fail("Couldn't send data", exc)

    def data_available(self) -> bool:
        """True if a receive would not block."""
        if self._sock is None:
            return False
        try:
            readable, _, broken = select.select([self._sock], [], [self._sock], 0)
        except (OSError, ValueError) as exc:
            self._fail("Error on socket in select()", exc)
        if broken:
            self._fail("Error on socket in select()")
        return bool(readable)

    def receive(self, size: int) -> bytes:
        """Read exactly `size` bytes, raising if the connection ends first."""
        sock = self._connection()
        buffer = bytearray()
        while len(buffer) < size:
            try:
                chunk = sock.recv(size - len(buffer))
            except OSError as exc:
                self._fail("Connection lost", exc)
            if not chunk:
                self._fail("Connection lost")
            buffer.extend(chunk)
        return bytes(buffer)

    def send_string(self, text: str) -> None:
        """Send a length prefix followed by the text and two zero bytes."""
        raw = text.encode("utf-8")
        self.send(_LENGTH.pack(len(raw) + 2) + raw + b"\0\0")

    def receive_string(self, max_length: int = DEFAULT_STRING_LIMIT) -> str:
        (length,) = _LENGTH.unpack(self.receive(_LENGTH.size))
        if length > max_length:
            self._fail("String buffer too small")
        if length < 0:
            self._fail("Invalid string length")
        raw = self.receive(length)
        return raw.split(b"\0", 1)[0].decode("utf-8")

    def close(self) -> None:
        self._cancel.set()
        for sock in (self._listener, self._sock):
            if sock is not None:
                try:
                    sock.close()
                except OSError:
                    pass
        self._listener = None
        self._sock = None
        self.last_error = ""
        self.is_open = False
        self.is_host = False