"""
HammerBot - IRC Transport
=========================

Blocking, line-based connection to the Twitch chat server.

DESIGN:
    IrcConnection is the message source the session loop reads from:
    next_event() blocks until one tokenized event is available and returns
    None once the server closes the connection. Keep-alive PINGs are
    answered here and never reach the classifier.

    Failures while reading surface as MessageSourceError so the session can
    log and retry. A line that does not tokenize is logged and skipped
    on the spot, with no retry delay.

    Failures while sending propagate as OSError so the moderation engine
    can log the text it failed to deliver.
"""

import socket
import ssl
from typing import Callable, Optional, TYPE_CHECKING

from hammerbot.core.constants import (
    LOG_TEXT_PREVIEW,
    REQUESTED_CAPABILITIES,
    SOCKET_RECV_SIZE,
    SOCKET_TIMEOUT,
)
from hammerbot.core.logger import logger
from hammerbot.irc.errors import MessageSourceError, WireParseError
from hammerbot.irc.models import RawEvent
from hammerbot.irc.wire import (
    build_cap_req,
    build_join,
    build_pass_nick,
    build_pong,
    build_privmsg,
    parse_irc_line,
)
from hammerbot.utils.error_handler import ErrorHandler

if TYPE_CHECKING:
    from hammerbot.core.config import Config


SocketFactory = Callable[[str, int], socket.socket]


def _open_socket(server: str, port: int) -> socket.socket:
    return socket.create_connection((server, port), timeout=SOCKET_TIMEOUT)


class IrcConnection:
    """
    One connection to the chat server for one channel.

    Attributes:
        server: Host name of the chat server.
        port: TCP port.
        nickname: Bot account nickname.
        channel: Channel in IRC form ("#name").
        malformed_lines: Lines skipped because they did not tokenize.
    """

    def __init__(
        self,
        server: str,
        port: int,
        nickname: str,
        password: str,
        channel: str,
        use_tls: bool = False,
        socket_factory: SocketFactory = _open_socket,
    ) -> None:
        self.server = server
        self.port = port
        self.nickname = nickname
        self.channel = channel
        self.use_tls = use_tls
        self._password = password
        self._socket_factory = socket_factory
        self._sock: Optional[socket.socket] = None
        self._buffer = b""
        self.malformed_lines = 0

    @classmethod
    def from_config(cls, config: "Config") -> "IrcConnection":
        """Build a connection from the loaded configuration."""
        return cls(
            server=config.irc_server,
            port=config.irc_port,
            nickname=config.username,
            password=config.oauth,
            channel=config.irc_channel,
            use_tls=config.irc_use_tls,
        )

    # =========================================================================
    # Connection Lifecycle
    # =========================================================================

    @property
    def connected(self) -> bool:
        return self._sock is not None

    def connect(self) -> None:
        """
        Open the socket (wrapped in TLS when enabled).

        Raises:
            OSError: If the server cannot be reached.
        """
        sock = self._socket_factory(self.server, self.port)
        if self.use_tls:
            context = ssl.create_default_context()
            sock = context.wrap_socket(sock, server_hostname=self.server)
        # Reads block until the server sends something.
        sock.settimeout(None)
        self._sock = sock
        self._buffer = b""

        logger.tree("Connected To Chat Server", [
            ("Server", f"{self.server}:{self.port}"),
            ("TLS", "yes" if self.use_tls else "no"),
            ("Nickname", self.nickname),
        ], emoji="🔌")

    def identify(self) -> None:
        """Log in, request the Twitch capabilities and join the channel."""
        for line in build_pass_nick(self._password, self.nickname):
            self._send_line(line)
        self._send_line(build_cap_req(REQUESTED_CAPABILITIES))
        self._send_line(build_join(self.channel))
        logger.info(f"Identified as {self.nickname}, joining {self.channel}")

    def close(self) -> None:
        if self._sock is None:
            return
        try:
            self._sock.close()
        except OSError as e:
            logger.warning(f"Error while closing connection: {e}")
        finally:
            self._sock = None
            self._buffer = b""

    # =========================================================================
    # Sending
    # =========================================================================

    def _send_line(self, line: str) -> None:
        if self._sock is None:
            raise ConnectionError("Not connected")
        if not line.startswith("PASS "):
            logger.debug(f"> {line}")
        self._sock.sendall(f"{line}\r\n".encode("utf-8"))

    def send(self, text: str) -> None:
        """
        Send a chat line to the channel.

        Raises:
            OSError: If the connection is closed or the write fails.
        """
        self._send_line(build_privmsg(self.channel, text))

    # =========================================================================
    # Receiving
    # =========================================================================

    def _read_line(self) -> Optional[str]:
        """Read one line, None at end of stream."""
        if self._sock is None:
            return None

        while b"\n" not in self._buffer:
            chunk = self._sock.recv(SOCKET_RECV_SIZE)
            if not chunk:
                logger.info("Chat server closed the connection")
                self.close()
                return None
            self._buffer += chunk

        line, self._buffer = self._buffer.split(b"\n", 1)
        return line.rstrip(b"\r").decode("utf-8", errors="replace")

    def next_event(self) -> Optional[RawEvent]:
        """
        Block until the next raw event arrives.

        Returns:
            The tokenized event, or None once the connection is closed.

        Raises:
            MessageSourceError: If reading from the socket fails.
        """
        while True:
            try:
                line = self._read_line()
            except ConnectionError as e:
                # Peer is gone: the next read reports end of stream.
                self.close()
                raise MessageSourceError(f"Connection lost: {e}") from e
            except OSError as e:
                raise MessageSourceError(f"Read failed: {e}") from e

            if line is None:
                return None
            if not line.strip():
                continue

            logger.debug(f"< {line}")
            try:
                event = parse_irc_line(line)
            except WireParseError as e:
                self.malformed_lines += 1
                ErrorHandler.handle(e, location="IrcConnection.next_event", line=line[:LOG_TEXT_PREVIEW])
                continue

            if event.command == "PING":
                self._answer_ping(event)
                continue
            return event

    def _answer_ping(self, event: RawEvent) -> None:
        payload = event.trailing or (event.params[0] if event.params else "")
        try:
            self._send_line(build_pong(payload))
        except OSError as e:
            raise MessageSourceError(f"Could not answer PING: {e}") from e


__all__ = [
    "IrcConnection",
]
