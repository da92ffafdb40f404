import pytest

from gbvm.link import (
    EXCHANGE_COMPLETED,
    LINK_MAX_PACKET_LENGTH,
    Exchange,
    LinkMode,
    LinkPort,
)


def test_no_mode_completes_immediately():
    port = LinkPort()
    ex = Exchange()
    assert ex.step(port, b"hi", 2) is True
    assert port.transmitted == []
    assert ex.state == EXCHANGE_COMPLETED


def test_master_sends_then_receives():
    port = LinkPort()
    port.set_mode(LinkMode.MASTER)
    ex = Exchange()
    assert ex.step(port, b"hi", 2) is False
    assert port.transmitted == [b"hi"]
    assert ex.step(port, b"hi", 2) is False
    port.complete_send()
    assert ex.step(port, b"hi", 2) is False
    assert ex.step(port, b"hi", 2) is False
    port.receive(b"yo")
    assert ex.step(port, b"hi", 2) is False
    assert ex.step(port, b"hi", 2) is True
    assert ex.received == b"yo"


def test_slave_receives_then_sends():
    port = LinkPort()
    port.set_mode(LinkMode.SLAVE)
    ex = Exchange()
    assert ex.step(port, b"xy", 2) is False
    assert ex.step(port, b"xy", 2) is False
    port.receive(b"ab")
    assert ex.step(port, b"xy", 2) is False
    assert ex.received == b"ab"
    assert port.transmitted == []
    assert ex.step(port, b"xy", 2) is False
    assert port.transmitted == [b"xy"]
    assert ex.step(port, b"xy", 2) is False
    port.complete_send()
    assert ex.step(port, b"xy", 2) is True


def test_length_is_clamped_to_packet_size():
    port = LinkPort()
    port.set_mode(LinkMode.MASTER)
    data = bytes(range(40))
    Exchange().step(port, data, 40)
    assert port.transmitted[0] == data[:LINK_MAX_PACKET_LENGTH]


def test_empty_packet_counts_as_sent():
    port = LinkPort()
    port.send_async(b"")
    assert port.packet_sent is True


def test_receive_too_long_raises():
    with pytest.raises(ValueError):
        LinkPort().receive(bytes(LINK_MAX_PACKET_LENGTH + 1))


def test_invalid_mode_raises():
    with pytest.raises(ValueError):
        LinkPort().set_mode(7)


def test_reset_abandons_exchange():
    port = LinkPort()
    port.set_mode(LinkMode.MASTER)
    ex = Exchange()
    ex.step(port, b"a", 1)
    ex.reset()
    assert ex.state == EXCHANGE_COMPLETED