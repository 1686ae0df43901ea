# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Responses sent by the Tock bootloader.

A bootloader encodes these and a flashing tool decodes them. Each variant
is a frozen dataclass; ``Response`` is the union of all of them.
"""

from dataclasses import dataclass
from typing import ClassVar, Union

from .protocol import ResponseCode


@dataclass(frozen=True)
class Overflow:
    code: ClassVar[ResponseCode] = ResponseCode.OVERFLOW


@dataclass(frozen=True)
class Pong:
    code: ClassVar[ResponseCode] = ResponseCode.PONG


@dataclass(frozen=True)
class BadAddress:
    code: ClassVar[ResponseCode] = ResponseCode.BAD_ADDRESS


@dataclass(frozen=True)
class InternalError:
    code: ClassVar[ResponseCode] = ResponseCode.INTERNAL_ERROR


@dataclass(frozen=True)
class BadArguments:
    code: ClassVar[ResponseCode] = ResponseCode.BAD_ARGUMENTS


@dataclass(frozen=True)
class Ok:
    code: ClassVar[ResponseCode] = ResponseCode.OK


@dataclass(frozen=True)
class Unknown:
    code: ClassVar[ResponseCode] = ResponseCode.UNKNOWN


@dataclass(frozen=True)
class ExtFlashTimeout:
    code: ClassVar[ResponseCode] = ResponseCode.EXT_FLASH_TIMEOUT


@dataclass(frozen=True)
class ExtFlashPageError:
    code: ClassVar[ResponseCode] = ResponseCode.EXT_FLASH_PAGE_ERROR


@dataclass(frozen=True)
class ChangeBaudFail:
    code: ClassVar[ResponseCode] = ResponseCode.CHANGE_BAUD_FAIL


@dataclass(frozen=True)
class CrcRxBuffer:
    """Length and CRC-32 of the bootloader's RX buffer."""
    length: int
    crc: int
    code: ClassVar[ResponseCode] = ResponseCode.CRC_RX_BUFFER


@dataclass(frozen=True)
class ReadRange:
    """Bytes read from internal flash."""
    data: bytes
    code: ClassVar[ResponseCode] = ResponseCode.READ_RANGE


@dataclass(frozen=True)
class ExReadRange:
    """Bytes read from external flash."""
    data: bytes
    code: ClassVar[ResponseCode] = ResponseCode.EX_READ_RANGE


@dataclass(frozen=True)
class GetAttr:
    """An attribute: 8 byte key and up to 55 bytes of value."""
    key: bytes
    value: bytes
    code: ClassVar[ResponseCode] = ResponseCode.GET_ATTR


@dataclass(frozen=True)
class CrcIntFlash:
    crc: int
    code: ClassVar[ResponseCode] = ResponseCode.CRC_INT_FLASH


@dataclass(frozen=True)
class CrcExtFlash:
    crc: int
    code: ClassVar[ResponseCode] = ResponseCode.CRC_EXT_FLASH


@dataclass(frozen=True)
class Info:
    """Bootloader info block (at most 192 bytes)."""
    info: bytes
    code: ClassVar[ResponseCode] = ResponseCode.INFO


Response = Union[
    Overflow,
    Pong,
    BadAddress,
    InternalError,
    BadArguments,
    Ok,
    Unknown,
    ExtFlashTimeout,
    ExtFlashPageError,
    CrcRxBuffer,
    ReadRange,
    ExReadRange,
    GetAttr,
    CrcIntFlash,
    CrcExtFlash,
    Info,
    ChangeBaudFail,
]

RESPONSE_TYPES = Response.__args__

# Zero-payload responses reporting that a command failed.
ERROR_RESPONSES = (
    Overflow,
    BadAddress,
    InternalError,
    BadArguments,
    Unknown,
    ExtFlashTimeout,
    ExtFlashPageError,
    ChangeBaudFail,
)
