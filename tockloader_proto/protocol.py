# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Tockloader protocol wire constants.

Opcode values and structural limits are part of the wire contract shared
with the Tock bootloader and must not change.
"""

from enum import IntEnum

# Sentinel byte: escapes its own literal occurrence and introduces an
# opcode marker.
ESCAPE_CHAR = 0xFC

# Fill value for the unused tail of a fixed-size region.
PAD_BYTE = 0xFF

MAX_INDEX = 16
KEY_LEN = 8
MAX_ATTR_LEN = 55
INT_PAGE_SIZE = 512
EXT_PAGE_SIZE = 256
MAX_INFO_LEN = 192

# Decoder scratch capacity: a 4 byte address plus an internal page, rounded up.
BUFFER_SIZE = 520


class CommandCode(IntEnum):
    """Command opcodes (host to bootloader)."""
    PING = 0x01
    INFO = 0x03
    ID = 0x04
    RESET = 0x05
    ERASE_PAGE = 0x06
    WRITE_PAGE = 0x07
    ERASE_EX_BLOCK = 0x08
    WRITE_EX_PAGE = 0x09
    CRC_RX_BUFFER = 0x10
    READ_RANGE = 0x11
    EX_READ_RANGE = 0x12
    SET_ATTR = 0x13
    GET_ATTR = 0x14
    CRC_INT_FLASH = 0x15
    CRC_EXT_FLASH = 0x16
    ERASE_EX_PAGE = 0x17
    EXT_FLASH_INIT = 0x18
    CLOCK_OUT = 0x19
    WRITE_FLASH_USER_PAGES = 0x20
    CHANGE_BAUD = 0x21

    def __str__(self) -> str:
        return self.name


class ResponseCode(IntEnum):
    """Response opcodes (bootloader to host)."""
    OVERFLOW = 0x10
    PONG = 0x11
    BAD_ADDRESS = 0x12
    INTERNAL_ERROR = 0x13
    BAD_ARGUMENTS = 0x14
    OK = 0x15
    UNKNOWN = 0x16
    EXT_FLASH_TIMEOUT = 0x17
    EXT_FLASH_PAGE_ERROR = 0x18
    CRC_RX_BUFFER = 0x19
    READ_RANGE = 0x20
    EX_READ_RANGE = 0x21
    GET_ATTR = 0x22
    CRC_INT_FLASH = 0x23
    CRC_EXT_FLASH = 0x24
    INFO = 0x25
    CHANGE_BAUD_FAIL = 0x26

    def __str__(self) -> str:
        return self.name


class BaudMode(IntEnum):
    """First payload byte of a ChangeBaud command."""
    SET = 0x01
    VERIFY = 0x02

    def __str__(self) -> str:
        return self.name
