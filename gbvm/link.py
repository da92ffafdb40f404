"""Serial link port state and the packet exchange instruction's state machine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional

LINK_MAX_PACKET_LENGTH = 32

PACKET_SEND_INIT = 1
PACKET_SEND_DONE = 2
PACKET_RECV_INIT = 4
PACKET_RECV_DONE = 8

EXCHANGE_STARTED = 0
EXCHANGE_COMPLETED = (
    PACKET_SEND_INIT | PACKET_SEND_DONE | PACKET_RECV_INIT | PACKET_RECV_DONE
)


class LinkMode(IntEnum):
    """Role of this console on the link cable."""

    NONE = 0
    MASTER = 1
    SLAVE = 2


@dataclass
class LinkPort:
    """Link port: the shared packet buffer and transfer flags."""

    mode: LinkMode = LinkMode.NONE
    packet: bytearray = field(
        default_factory=lambda: bytearray(LINK_MAX_PACKET_LENGTH)
    )
    packet_sent: bool = False
    packet_received: bool = False
    transmitted: list[bytes] = field(default_factory=list)

    def set_mode(self, mode: int) -> None:
        """Switch the link role."""
        self.mode = LinkMode(mode)

    def send_async(self, data: bytes) -> None:
        """Start sending a packet; an empty packet counts as sent at once."""
        data = bytes(data)
        if len(data) > LINK_MAX_PACKET_LENGTH:
            raise ValueError(f"packet of {len(data)} bytes is too long")
        self.packet[: len(data)] = data
        self.transmitted.append(data)
        self.packet_sent = len(data) == 0

    def complete_send(self) -> None:
        """Mark the packet in flight as delivered."""
        self.packet_sent = True

    def receive(self, data: bytes) -> None:
        """Deliver an incoming packet into the buffer."""
        data = bytes(data)
        if len(data) > LINK_MAX_PACKET_LENGTH:
            raise ValueError(f"packet of {len(data)} bytes is too long")
        self.packet[: len(data)] = data
        self.packet_received = True


@dataclass
class Exchange:
    """Progress of one send-and-receive exchange over the link."""

    state: int = EXCHANGE_COMPLETED
    received: Optional[bytes] = None

    def reset(self) -> None:
        """Abandon any exchange in progress."""
        self.state = EXCHANGE_COMPLETED

    def _send(self, port: LinkPort, send: bytes, length: int) -> None:
        payload = bytes(send[:length]).ljust(length, b"\0")
        port.send_async(payload)
        self.state |= PACKET_SEND_INIT

    def _take(self, port: LinkPort, length: int) -> None:
        self.received = bytes(port.packet[:length])
        self.state |= PACKET_RECV_DONE

    def step(self, port: LinkPort, send: bytes, length: int) -> bool:
        """Advance the exchange by one stage; True once it is complete.

        A master sends first and then receives; a slave receives first.
        With no link mode the exchange ends immediately.
        """
        if port.mode == LinkMode.NONE:
            self.state = EXCHANGE_COMPLETED
            return True
        if self.state == EXCHANGE_COMPLETED:
            self.state = EXCHANGE_STARTED
            self.received = None
        length = min(max(length, 0), LINK_MAX_PACKET_LENGTH)

        if port.mode == LinkMode.MASTER:
            if not self.state & PACKET_SEND_INIT:
                port.packet_sent = port.packet_received = False
                self._send(port, send, length)
            elif not self.state & PACKET_SEND_DONE:
                if port.packet_sent:
                    self.state |= PACKET_SEND_DONE
            elif not self.state & PACKET_RECV_INIT:
                if port.packet_received:
                    self.state |= PACKET_RECV_INIT
            elif not self.state & PACKET_RECV_DONE:
                self._take(port, length)
        else:
            if not self.state & PACKET_RECV_INIT:
                port.packet_sent = port.packet_received = False
                self.state |= PACKET_RECV_INIT
            elif not self.state & PACKET_RECV_DONE:
                if port.packet_received:
                    self._take(port, length)
            elif not self.state & PACKET_SEND_INIT:
                self._send(port, send, length)
            elif not self.state & PACKET_SEND_DONE:
                if port.packet_sent:
                    self.state |= PACKET_SEND_DONE

        return self.state == EXCHANGE_COMPLETED