# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Lazy encoders for the tockloader protocol.

``CommandEncoder`` is used by a flashing tool, ``ResponseEncoder`` by a
bootloader. Both check the message when constructed and then yield the
wire bytes one at a time:

    for byte in CommandEncoder(commands.ErasePage(address=0x10000)):
        port.write(bytes([byte]))
"""

from typing import List

from . import commands, responses
from .commands import COMMAND_TYPES, Command
from .errors import BadArgumentsError
from .framing import FrameEncoder, Region, block, le16, le32, marker, u8
from .protocol import (
    EXT_PAGE_SIZE,
    INT_PAGE_SIZE,
    KEY_LEN,
    MAX_ATTR_LEN,
    MAX_INDEX,
    MAX_INFO_LEN,
    BaudMode,
)
from .responses import RESPONSE_TYPES, Response


class CommandEncoder(FrameEncoder):
    """Takes a Command and gives you bytes."""

    def __init__(self, command: Command):
        """
        Args:
            command: Command to encode. Payloads are referenced, not copied.

        Raises:
            BadArgumentsError: If the command violates its size limits
            TypeError: If ``command`` is not a Command
        """
        if not isinstance(command, COMMAND_TYPES):
            raise TypeError(f"Cannot encode {type(command).__name__} as a command")
        self.command = command
        super().__init__(_command_payload(command) + [marker(command.code)])


class ResponseEncoder(FrameEncoder):
    """Takes a Response and gives you bytes."""

    def __init__(self, response: Response):
        """
        Args:
            response: Response to encode. Payloads are referenced, not copied.

        Raises:
            BadArgumentsError: If the response violates its size limits
            TypeError: If ``response`` is not a Response
        """
        if not isinstance(response, RESPONSE_TYPES):
            raise TypeError(f"Cannot encode {type(response).__name__} as a response")
        self.response = response
        super().__init__([marker(response.code)] + _response_payload(response))


def encode_command(command: Command) -> bytes:
    """Encode a whole command frame."""
    return bytes(CommandEncoder(command))


def encode_response(response: Response) -> bytes:
    """Encode a whole response frame."""
    return bytes(ResponseEncoder(response))


def _command_payload(command: Command) -> List[Region]:
    if isinstance(command, (commands.ErasePage, commands.EraseExBlock, commands.EraseExPage)):
        return [le32(command.address)]

    if isinstance(command, commands.WritePage):
        _check_length("WritePage data", command.data, INT_PAGE_SIZE)
        return [le32(command.address), block(command.data, INT_PAGE_SIZE)]

    if isinstance(command, commands.WriteExPage):
        _check_length("WriteExPage data", command.data, EXT_PAGE_SIZE)
        return [le32(command.address), block(command.data, EXT_PAGE_SIZE)]

    if isinstance(command, (commands.ReadRange, commands.ExReadRange)):
        return [le32(command.address), le16(command.length)]

    if isinstance(command, (commands.CrcIntFlash, commands.CrcExtFlash)):
        return [le32(command.address), le32(command.length)]

    if isinstance(command, commands.SetAttr):
        if command.index > MAX_INDEX:
            raise BadArgumentsError(f"Attribute index {command.index} exceeds {MAX_INDEX}")
        _check_length("SetAttr key", command.key, KEY_LEN)
        _check_max_length("SetAttr value", command.value, MAX_ATTR_LEN)
        # One fill byte after the value; decoders want more than the declared length.
        return [
            u8(command.index),
            block(command.key, KEY_LEN),
            u8(len(command.value)),
            block(command.value, len(command.value) + 1),
        ]

    if isinstance(command, commands.GetAttr):
        return [u8(command.index)]

    if isinstance(command, commands.WriteFlashUserPages):
        return [le32(command.page1), le32(command.page2)]

    if isinstance(command, commands.ChangeBaud):
        if command.mode not in (BaudMode.SET, BaudMode.VERIFY):
            raise BadArgumentsError(f"Unknown baud mode {command.mode!r}")
        return [u8(command.mode), le32(command.baud)]

    # Ping, Info, Id, Reset, CrcRxBuffer, ExtFlashInit, ClockOut
    return []


def _response_payload(response: Response) -> List[Region]:
    if isinstance(response, responses.CrcRxBuffer):
        return [le16(response.length), le32(response.crc)]

    if isinstance(response, (responses.ReadRange, responses.ExReadRange)):
        return [block(response.data)]

    if isinstance(response, responses.GetAttr):
        _check_length("GetAttr key", response.key, KEY_LEN)
        _check_max_length("GetAttr value", response.value, MAX_ATTR_LEN)
        return [
            block(response.key, KEY_LEN),
            u8(len(response.value)),
            block(response.value, MAX_ATTR_LEN),
        ]

    if isinstance(response, (responses.CrcIntFlash, responses.CrcExtFlash)):
        return [le32(response.crc)]

    if isinstance(response, responses.Info):
        _check_max_length("Info", response.info, MAX_INFO_LEN)
        return [block(response.info)]

    return []


def _check_length(what: str, data: bytes, length: int) -> None:
    if len(data) != length:
        raise BadArgumentsError(f"{what} must be {length} bytes, got {len(data)}")


def _check_max_length(what: str, data: bytes, limit: int) -> None:
    if len(data) > limit:
        raise BadArgumentsError(f"{what} must be at most {limit} bytes, got {len(data)}")
