# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Incremental decoders for the tockloader protocol.

``CommandDecoder`` is used by a bootloader, ``ResponseDecoder`` by a
flashing tool. Both are fed one byte at a time with ``receive`` and return
None until a complete message has been seen.
"""

import logging
from typing import Optional

from . import commands, responses
from .commands import Command
from .errors import (
    BadArgumentsError,
    CodecError,
    SetLengthError,
    UnknownCommandError,
    UnsetLengthError,
)
from .framing import FrameDecoder
from .protocol import (
    EXT_PAGE_SIZE,
    INT_PAGE_SIZE,
    KEY_LEN,
    MAX_ATTR_LEN,
    MAX_INDEX,
    MAX_INFO_LEN,
    BaudMode,
    CommandCode,
    ResponseCode,
)
from .responses import Response

logger = logging.getLogger(__name__)

_NO_ARGUMENTS = {
    CommandCode.PING: commands.Ping,
    CommandCode.INFO: commands.Info,
    CommandCode.ID: commands.Id,
    CommandCode.RESET: commands.Reset,
    CommandCode.CRC_RX_BUFFER: commands.CrcRxBuffer,
    CommandCode.EXT_FLASH_INIT: commands.ExtFlashInit,
    CommandCode.CLOCK_OUT: commands.ClockOut,
}

_ADDRESS_ONLY = {
    CommandCode.ERASE_PAGE: commands.ErasePage,
    CommandCode.ERASE_EX_BLOCK: commands.EraseExBlock,
    CommandCode.ERASE_EX_PAGE: commands.EraseExPage,
}

# u32 address followed by a u16 length
_READS = {
    CommandCode.READ_RANGE: commands.ReadRange,
    CommandCode.EX_READ_RANGE: commands.ExReadRange,
}

# u32 address followed by a u32 length
_CRCS = {
    CommandCode.CRC_INT_FLASH: commands.CrcIntFlash,
    CommandCode.CRC_EXT_FLASH: commands.CrcExtFlash,
}

_PAGE_WRITES = {
    CommandCode.WRITE_PAGE: (commands.WritePage, INT_PAGE_SIZE),
    CommandCode.WRITE_EX_PAGE: (commands.WriteExPage, EXT_PAGE_SIZE),
}

# index, key and value length
_SET_ATTR_HEADER = 1 + KEY_LEN + 1


class CommandDecoder(FrameDecoder):
    """
    Takes bytes and gives you Commands.

    Example:
        decoder = CommandDecoder()
        for byte in wire_bytes:
            command = decoder.receive(byte)
            if command is not None:
                handle(command)
    """

    def receive(self, byte: int) -> Optional[Command]:
        """
        Process one incoming byte.

        Returns:
            The decoded Command once its marker arrives, None otherwise.
            Unrecognised opcodes are ignored and also give None.

        Raises:
            BadArgumentsError: If the buffered payload does not fit the
                command named by the marker
        """
        return super().receive(byte)

    def _handle_marker(self, opcode: int) -> Optional[Command]:
        try:
            command = self._reassemble(opcode)
        except CodecError as e:
            logger.debug("Discarding %d byte command payload: %s", self._count, e)
            self._count = 0
            raise
        if command is not None:
            self._count = 0
        return command

    def _reassemble(self, opcode: int) -> Optional[Command]:
        if opcode in _NO_ARGUMENTS:
            return _NO_ARGUMENTS[opcode]()

        if opcode in _ADDRESS_ONLY:
            self._expect(4)
            return _ADDRESS_ONLY[opcode](address=self._read_u32(0))

        if opcode in _READS:
            self._expect(6)
            return _READS[opcode](address=self._read_u32(0), length=self._read_u16(4))

        if opcode in _CRCS:
            self._expect(8)
            return _CRCS[opcode](address=self._read_u32(0), length=self._read_u32(4))

        if opcode in _PAGE_WRITES:
            command_type, page_size = _PAGE_WRITES[opcode]
            self._expect(4 + page_size)
            return command_type(
                address=self._read_u32(0),
                data=bytes(self._buffer[4:4 + page_size]),
            )

        if opcode == CommandCode.SET_ATTR:
            return self._reassemble_set_attr()

        if opcode == CommandCode.GET_ATTR:
            self._expect(1)
            return commands.GetAttr(index=self._buffer[0])

        if opcode == CommandCode.WRITE_FLASH_USER_PAGES:
            self._expect(8)
            return commands.WriteFlashUserPages(
                page1=self._read_u32(0),
                page2=self._read_u32(4),
            )

        if opcode == CommandCode.CHANGE_BAUD:
            self._expect(5)
            try:
                mode = BaudMode(self._buffer[0])
            except ValueError:
                raise BadArgumentsError(f"Unknown baud mode 0x{self._buffer[0]:02x}") from None
            return commands.ChangeBaud(mode=mode, baud=self._read_u32(1))

        return None

    def _reassemble_set_attr(self) -> commands.SetAttr:
        # The value length sits mid-payload, so at least one byte must
        # follow the declared value.
        if self._count < _SET_ATTR_HEADER:
            raise BadArgumentsError(f"SetAttr needs {_SET_ATTR_HEADER} bytes, got {self._count}")
        index = self._buffer[0]
        length = self._buffer[1 + KEY_LEN]
        if self._count <= _SET_ATTR_HEADER + length:
            raise BadArgumentsError(
                f"SetAttr declares {length} value bytes but only {self._count} bytes buffered"
            )
        if index > MAX_INDEX or length > MAX_ATTR_LEN:
            raise BadArgumentsError(f"SetAttr index {index} or value length {length} out of range")
        return commands.SetAttr(
            index=index,
            key=bytes(self._buffer[1:1 + KEY_LEN]),
            value=bytes(self._buffer[_SET_ATTR_HEADER:_SET_ATTR_HEADER + length]),
        )

    def _expect(self, length: int) -> None:
        if self._count != length:
            raise BadArgumentsError(f"Expected {length} payload bytes, got {self._count}")


_SELF_TERMINATING = {
    ResponseCode.OVERFLOW: responses.Overflow,
    ResponseCode.PONG: responses.Pong,
    ResponseCode.BAD_ADDRESS: responses.BadAddress,
    ResponseCode.INTERNAL_ERROR: responses.InternalError,
    ResponseCode.BAD_ARGUMENTS: responses.BadArguments,
    ResponseCode.OK: responses.Ok,
    ResponseCode.UNKNOWN: responses.Unknown,
    ResponseCode.EXT_FLASH_TIMEOUT: responses.ExtFlashTimeout,
    ResponseCode.EXT_FLASH_PAGE_ERROR: responses.ExtFlashPageError,
    ResponseCode.CHANGE_BAUD_FAIL: responses.ChangeBaudFail,
}

# Trailing payload length armed automatically when the marker arrives.
_AUTO_ARMED = {
    ResponseCode.CRC_RX_BUFFER: 2 + 4,
    ResponseCode.GET_ATTR: KEY_LEN + 1 + MAX_ATTR_LEN,
    ResponseCode.CRC_INT_FLASH: 4,
    ResponseCode.CRC_EXT_FLASH: 4,
    ResponseCode.INFO: 8,
}

# No length on the wire; the caller arms the length it asked for.
_CALLER_ARMED = (ResponseCode.READ_RANGE, ResponseCode.EX_READ_RANGE)


class ResponseDecoder(FrameDecoder):
    """
    Takes bytes and gives you Responses.

    ReadRange and ExReadRange responses carry no length on the wire, so
    before feeding one the caller must arm the decoder with the length it
    requested:

        decoder = ResponseDecoder()
        decoder.set_payload_len(command.length)
        for byte in wire_bytes:
            response = decoder.receive(byte)
    """

    def __init__(self):
        super().__init__()
        self._needed: Optional[int] = None
        # Set once a length-bearing header has been buffered.
        self._in_frame = False

    @property
    def armed(self) -> bool:
        """True while an expected payload length is outstanding."""
        return self._needed is not None

    def set_payload_len(self, length: int) -> None:
        """
        Arm the expected payload length of the next response.

        Args:
            length: Number of payload bytes following the opcode

        Raises:
            SetLengthError: If a length is already armed
        """
        if self._needed is not None:
            raise SetLengthError("Payload length already set")
        # The opcode occupies the first buffer slot.
        self._needed = length + 1

    def receive(self, byte: int) -> Optional[Response]:
        """
        Process one incoming byte.

        Returns:
            The decoded Response once complete, None otherwise

        Raises:
            UnknownCommandError: On an unrecognised response opcode
            UnsetLengthError: On a ReadRange/ExReadRange marker with no
                length armed
            SetLengthError: If a self-describing response arrives while
                a length is already armed
            BadArgumentsError: If the payload is structurally invalid
        """
        return super().receive(byte)

    def reset(self) -> None:
        """Discard buffered bytes and any partial response. An armed length is kept."""
        super().reset()
        self._in_frame = False

    def _load(self, byte: int) -> Optional[Response]:
        self._store(byte)
        if not self._in_frame or self._needed != self._count:
            return None
        try:
            return self._reassemble()
        finally:
            self._count = 0
            self._needed = None
            self._in_frame = False

    def _handle_marker(self, opcode: int) -> Optional[Response]:
        if opcode in _SELF_TERMINATING:
            self._count = 0
            self._needed = None
            self._in_frame = False
            return _SELF_TERMINATING[opcode]()

        if opcode in _AUTO_ARMED:
            # An info block of another size needs the caller to arm it.
            if not (opcode == ResponseCode.INFO and self._needed is not None):
                if self._needed is not None:
                    raise self._discard(SetLengthError(
                        f"Length armed before self-describing response 0x{opcode:02x}"
                    ))
                self._needed = _AUTO_ARMED[opcode] + 1
        elif opcode in _CALLER_ARMED:
            if self._needed is None:
                raise self._discard(UnsetLengthError(
                    f"No payload length set for response 0x{opcode:02x}"
                ))
        else:
            raise self._discard(UnknownCommandError(f"Unknown response 0x{opcode:02x}"))

        # Responses are header-first; anything buffered before the marker is stale.
        self._count = 0
        self._in_frame = True
        return self._load(opcode)

    def _reassemble(self) -> Response:
        opcode = self._buffer[0]

        if opcode == ResponseCode.CRC_RX_BUFFER:
            return responses.CrcRxBuffer(length=self._read_u16(1), crc=self._read_u32(3))

        if opcode == ResponseCode.READ_RANGE:
            return responses.ReadRange(data=bytes(self._buffer[1:self._count]))

        if opcode == ResponseCode.EX_READ_RANGE:
            return responses.ExReadRange(data=bytes(self._buffer[1:self._count]))

        if opcode == ResponseCode.GET_ATTR:
            length = self._buffer[1 + KEY_LEN]
            start = 2 + KEY_LEN
            if length > MAX_ATTR_LEN or start + length > self._count:
                raise BadArgumentsError(f"GetAttr value length {length} out of range")
            return responses.GetAttr(
                key=bytes(self._buffer[1:1 + KEY_LEN]),
                value=bytes(self._buffer[start:start + length]),
            )

        if opcode == ResponseCode.CRC_INT_FLASH:
            return responses.CrcIntFlash(crc=self._read_u32(1))

        if opcode == ResponseCode.CRC_EXT_FLASH:
            return responses.CrcExtFlash(crc=self._read_u32(1))

        if opcode == ResponseCode.INFO:
            if self._count - 1 > MAX_INFO_LEN:
                raise BadArgumentsError(f"Info block of {self._count - 1} bytes is too long")
            return responses.Info(info=bytes(self._buffer[1:self._count]))

        raise UnknownCommandError(f"Unknown response 0x{opcode:02x}")

    def _discard(self, error: CodecError) -> CodecError:
        logger.debug("Discarding %d byte response: %s", self._count, error)
        self._count = 0
        self._needed = None
        self._in_frame = False
        return error
