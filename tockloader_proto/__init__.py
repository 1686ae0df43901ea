# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Tockloader protocol - Python codec and serial client.

This package implements the escape-framed serial protocol spoken by the
Tock bootloader: incremental decoders and lazy encoders for both the
command and the response direction, plus a serial transport for host
tools.

Example usage:
    from tockloader_proto import CommandEncoder, ResponseDecoder, commands

    frame = bytes(CommandEncoder(commands.ReadRange(address=0x30000, length=4)))

    decoder = ResponseDecoder()
    decoder.set_payload_len(4)
    for byte in received:
        response = decoder.receive(byte)

    with Transport("/dev/ttyUSB0") as transport:
        transport.ping()
        transport.flash_file("app.bin", address=0x30000)
"""

from . import commands, responses
from .commands import Command
from .crc32 import crc32
from .decoder import CommandDecoder, ResponseDecoder
from .encoder import CommandEncoder, ResponseEncoder, encode_command, encode_response
from .errors import (
    CodecError,
    UnknownCommandError,
    BadArgumentsError,
    UnsetLengthError,
    SetLengthError,
)
from .protocol import (
    ESCAPE_CHAR,
    CommandCode,
    ResponseCode,
    BaudMode,
    MAX_INDEX,
    KEY_LEN,
    MAX_ATTR_LEN,
    INT_PAGE_SIZE,
    EXT_PAGE_SIZE,
    MAX_INFO_LEN,
)
from .responses import Response
from .transport import (
    Transport,
    TransportError,
    TimeoutError,
    ProtocolError,
    BootloaderError,
    UploadError,
)

__version__ = "0.1.0"

__all__ = [
    # Data model
    "commands",
    "responses",
    "Command",
    "Response",
    # Constants
    "ESCAPE_CHAR",
    "CommandCode",
    "ResponseCode",
    "BaudMode",
    "MAX_INDEX",
    "KEY_LEN",
    "MAX_ATTR_LEN",
    "INT_PAGE_SIZE",
    "EXT_PAGE_SIZE",
    "MAX_INFO_LEN",
    # Codec
    "CommandDecoder",
    "ResponseDecoder",
    "CommandEncoder",
    "ResponseEncoder",
    "encode_command",
    "encode_response",
    # Errors
    "CodecError",
    "UnknownCommandError",
    "BadArgumentsError",
    "UnsetLengthError",
    "SetLengthError",
    # CRC
    "crc32",
    # Transport
    "Transport",
    "TransportError",
    "TimeoutError",
    "ProtocolError",
    "BootloaderError",
    "UploadError",
]
