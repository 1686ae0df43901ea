# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Commands understood by the Tock bootloader.

A flashing tool encodes these and a bootloader decodes them. Each variant
is a frozen dataclass; ``Command`` is the union of all of them.
"""

from dataclasses import dataclass
from typing import ClassVar, Union

from .protocol import BaudMode, CommandCode


@dataclass(frozen=True)
class Ping:
    """Ask the bootloader to drop its RX buffer and answer with Pong."""
    code: ClassVar[CommandCode] = CommandCode.PING


@dataclass(frozen=True)
class Info:
    """Request the bootloader info block."""
    code: ClassVar[CommandCode] = CommandCode.INFO


@dataclass(frozen=True)
class Id:
    """Request the 8 byte unique ID."""
    code: ClassVar[CommandCode] = CommandCode.ID


@dataclass(frozen=True)
class Reset:
    """Reset the bootloader's TX and RX buffers."""
    code: ClassVar[CommandCode] = CommandCode.RESET


@dataclass(frozen=True)
class ErasePage:
    """Erase the 512 byte internal flash page starting at ``address``."""
    address: int
    code: ClassVar[CommandCode] = CommandCode.ERASE_PAGE


@dataclass(frozen=True)
class WritePage:
    """Write one 512 byte page of internal flash."""
    address: int
    data: bytes
    code: ClassVar[CommandCode] = CommandCode.WRITE_PAGE


@dataclass(frozen=True)
class EraseExBlock:
    """Erase an 8 page (2048 byte) block of external flash."""
    address: int
    code: ClassVar[CommandCode] = CommandCode.ERASE_EX_BLOCK


@dataclass(frozen=True)
class WriteExPage:
    """Write one 256 byte page of external flash."""
    address: int
    data: bytes
    code: ClassVar[CommandCode] = CommandCode.WRITE_EX_PAGE


@dataclass(frozen=True)
class CrcRxBuffer:
    """Request the length and CRC of the bootloader's RX buffer."""
    code: ClassVar[CommandCode] = CommandCode.CRC_RX_BUFFER


@dataclass(frozen=True)
class ReadRange:
    """Read ``length`` bytes of internal flash."""
    address: int
    length: int
    code: ClassVar[CommandCode] = CommandCode.READ_RANGE


@dataclass(frozen=True)
class ExReadRange:
    """Read ``length`` bytes of external flash."""
    address: int
    length: int
    code: ClassVar[CommandCode] = CommandCode.EX_READ_RANGE


@dataclass(frozen=True)
class SetAttr:
    """
    Write a payload attribute.

    ``key`` is 8 bytes (null padded), ``value`` at most 55 bytes and may
    contain nulls. ``index`` must not exceed 16.
    """
    index: int
    key: bytes
    value: bytes
    code: ClassVar[CommandCode] = CommandCode.SET_ATTR


@dataclass(frozen=True)
class GetAttr:
    """Read the payload attribute at ``index``."""
    index: int
    code: ClassVar[CommandCode] = CommandCode.GET_ATTR


@dataclass(frozen=True)
class CrcIntFlash:
    """Request the CRC-32 of a range of internal flash."""
    address: int
    length: int
    code: ClassVar[CommandCode] = CommandCode.CRC_INT_FLASH


@dataclass(frozen=True)
class CrcExtFlash:
    """Request the CRC-32 of a range of external flash."""
    address: int
    length: int
    code: ClassVar[CommandCode] = CommandCode.CRC_EXT_FLASH


@dataclass(frozen=True)
class EraseExPage:
    """Erase the 256 byte external flash page starting at ``address``."""
    address: int
    code: ClassVar[CommandCode] = CommandCode.ERASE_EX_PAGE


@dataclass(frozen=True)
class ExtFlashInit:
    """Initialise the external flash chip (256 byte pages)."""
    code: ClassVar[CommandCode] = CommandCode.EXT_FLASH_INIT


@dataclass(frozen=True)
class ClockOut:
    """Loop forever with the 32kHz clock on PA19, for calibration."""
    code: ClassVar[CommandCode] = CommandCode.CLOCK_OUT


@dataclass(frozen=True)
class WriteFlashUserPages:
    """Write the two flash user pages."""
    page1: int
    page2: int
    code: ClassVar[CommandCode] = CommandCode.WRITE_FLASH_USER_PAGES


@dataclass(frozen=True)
class ChangeBaud:
    """
    Change the bootloader baud rate.

    The host sends ``BaudMode.SET`` with the new rate, switches its own port,
    then confirms with ``BaudMode.VERIFY`` and the same rate. Without the
    confirmation the bootloader reverts to the old rate.
    """
    mode: BaudMode
    baud: int
    code: ClassVar[CommandCode] = CommandCode.CHANGE_BAUD


Command = Union[
    Ping,
    Info,
    Id,
    Reset,
    ErasePage,
    WritePage,
    EraseExBlock,
    WriteExPage,
    CrcRxBuffer,
    ReadRange,
    ExReadRange,
    SetAttr,
    GetAttr,
    CrcIntFlash,
    CrcExtFlash,
    EraseExPage,
    ExtFlashInit,
    ClockOut,
    WriteFlashUserPages,
    ChangeBaud,
]

COMMAND_TYPES = Command.__args__
