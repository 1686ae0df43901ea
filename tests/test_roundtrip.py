# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""Encoder output fed back through the matching decoder."""

import pytest
from tockloader_proto import commands, responses
from tockloader_proto.decoder import CommandDecoder, ResponseDecoder
from tockloader_proto.encoder import encode_command, encode_response
from tockloader_proto.protocol import (
    ESCAPE_CHAR,
    EXT_PAGE_SIZE,
    INT_PAGE_SIZE,
    MAX_ATTR_LEN,
    BaudMode,
)

KEY = b"version\x00"
SENTINELS = bytes([ESCAPE_CHAR]) * 4


def decode_all(decoder, data):
    """Feed every byte, returning all decoded messages."""
    results = [decoder.receive(b) for b in data]
    return [r for r in results if r is not None]


COMMANDS = [
    commands.Ping(),
    commands.Info(),
    commands.Id(),
    commands.Reset(),
    commands.ErasePage(address=0x00030000),
    commands.WritePage(address=0x00030200, data=bytes(range(256)) * 2),
    commands.EraseExBlock(address=0xFCFCFCFC),
    commands.WriteExPage(address=0x1000, data=SENTINELS * (EXT_PAGE_SIZE // 4)),
    commands.CrcRxBuffer(),
    commands.ReadRange(address=0x30000, length=512),
    commands.ExReadRange(address=0x40000, length=0xFC),
    commands.SetAttr(index=0, key=KEY, value=b""),
    commands.SetAttr(index=16, key=SENTINELS * 2, value=b"\xFC" * MAX_ATTR_LEN),
    commands.GetAttr(index=16),
    commands.CrcIntFlash(address=0x30000, length=0x10000),
    commands.CrcExtFlash(address=0, length=0xFFFFFFFF),
    commands.EraseExPage(address=0x2000),
    commands.ExtFlashInit(),
    commands.ClockOut(),
    commands.WriteFlashUserPages(page1=0x11223344, page2=0xFC00FC00),
    commands.ChangeBaud(mode=BaudMode.SET, baud=921600),
    commands.ChangeBaud(mode=BaudMode.VERIFY, baud=115200),
]


RESPONSES = [
    responses.Overflow(),
    responses.Pong(),
    responses.BadAddress(),
    responses.InternalError(),
    responses.BadArguments(),
    responses.Ok(),
    responses.Unknown(),
    responses.ExtFlashTimeout(),
    responses.ExtFlashPageError(),
    responses.ChangeBaudFail(),
    responses.CrcRxBuffer(length=INT_PAGE_SIZE, crc=0xFCFCFCFC),
    responses.GetAttr(key=KEY, value=b"1.1.0"),
    responses.GetAttr(key=SENTINELS * 2, value=b"\xFC" * MAX_ATTR_LEN),
    responses.GetAttr(key=KEY, value=b""),
    responses.CrcIntFlash(crc=0xDEADBEEF),
    responses.CrcExtFlash(crc=0),
    responses.Info(info=b"tockboot"),
]


class TestCommandRoundTrip:
    """Every command survives encode then decode."""

    @pytest.mark.parametrize("command", COMMANDS, ids=lambda c: type(c).__name__)
    def test_round_trip(self, command):
        assert decode_all(CommandDecoder(), encode_command(command)) == [command]

    def test_back_to_back(self):
        """A stream of commands decodes in order with one decoder."""
        stream = b"".join(encode_command(c) for c in COMMANDS)
        assert decode_all(CommandDecoder(), stream) == COMMANDS


class TestResponseRoundTrip:
    """Every response survives encode then decode."""

    @pytest.mark.parametrize("response", RESPONSES, ids=lambda r: type(r).__name__)
    def test_round_trip(self, response):
        assert decode_all(ResponseDecoder(), encode_response(response)) == [response]

    @pytest.mark.parametrize("response_type", [responses.ReadRange, responses.ExReadRange])
    @pytest.mark.parametrize("data", [b"", b"\x00\x11\x22\x33", SENTINELS, bytes(range(256)) * 2])
    def test_read_round_trip(self, response_type, data):
        """Read responses need the requested length armed first."""
        response = response_type(data=data)
        decoder = ResponseDecoder()
        decoder.set_payload_len(len(data))
        assert decode_all(decoder, encode_response(response)) == [response]

    def test_long_info_caller_armed(self):
        info = b"\xFC" + b"tock" * 47 + b"\xFC" * 3
        decoder = ResponseDecoder()
        decoder.set_payload_len(len(info))
        response = responses.Info(info=info)
        assert decode_all(decoder, encode_response(response)) == [response]

    def test_back_to_back(self):
        """A stream of self-describing responses decodes in order."""
        stream = b"".join(encode_response(r) for r in RESPONSES)
        assert decode_all(ResponseDecoder(), stream) == RESPONSES


class TestEscaping:
    """Sentinel stuffing is undone exactly by the decoder."""

    @pytest.mark.parametrize("data", [
        b"",
        SENTINELS,
        bytes([ESCAPE_CHAR, 0x00]) * 128,
        bytes(range(256)),
    ])
    def test_payload_is_idempotent(self, data):
        """Decoded read data matches the input byte for byte."""
        decoder = ResponseDecoder()
        decoder.set_payload_len(len(data))
        frame = encode_response(responses.ReadRange(data=data))
        assert len(frame) == 2 + len(data) + data.count(ESCAPE_CHAR)
        (decoded,) = decode_all(decoder, frame)
        assert decoded.data == data
