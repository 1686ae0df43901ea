# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Escape-byte framing shared by the command and response codecs.

The sentinel 0xFC plays two roles on the wire:

    0xFC 0xFC   one literal 0xFC byte of payload
    0xFC <op>   a marker; <op> is the opcode of the message

Commands put the marker after their payload, responses put it first.
Decoders buffer unescaped payload bytes in a fixed-size scratch buffer
and hand markers to a direction-specific handler. Encoders walk a list of
regions and double every sentinel they emit, except in the marker itself.
"""

from enum import Enum
from typing import NamedTuple, Optional, Sequence

from .errors import BadArgumentsError
from .protocol import BUFFER_SIZE, ESCAPE_CHAR, PAD_BYTE


class DecoderState(Enum):
    """Framing state of a decoder."""
    LOADING = 0
    ESCAPE = 1


class FrameDecoder:
    """
    Byte-at-a-time decoder base.

    Subclasses implement ``_handle_marker`` and may override ``_load`` to
    act on each stored byte.
    """

    def __init__(self):
        self._state = DecoderState.LOADING
        self._buffer = bytearray(BUFFER_SIZE)
        self._count = 0

    @property
    def count(self) -> int:
        """Number of payload bytes currently buffered."""
        return self._count

    def reset(self) -> None:
        """Discard buffered bytes. The framing state is kept."""
        self._count = 0

    def receive(self, byte: int):
        """
        Feed one byte from the wire.

        Args:
            byte: Next received byte (0-255)

        Returns:
            A decoded message, or None if more bytes are needed

        Raises:
            CodecError: If the bytes received so far are malformed
        """
        if self._state is DecoderState.LOADING:
            if byte == ESCAPE_CHAR:
                self._state = DecoderState.ESCAPE
                return None
            return self._load(byte)

        self._state = DecoderState.LOADING
        if byte == ESCAPE_CHAR:
            return self._load(byte)
        return self._handle_marker(byte)

    def _store(self, byte: int) -> None:
        # Bytes past capacity are dropped.
        if self._count < len(self._buffer):
            self._buffer[self._count] = byte
            self._count += 1

    def _load(self, byte: int):
        self._store(byte)
        return None

    def _handle_marker(self, opcode: int):
        """
        Act on a marker. Subclasses must override this.

        Returns:
            A decoded message, or None to keep buffering
        """
        raise NotImplementedError

    def _read_u16(self, offset: int) -> int:
        return int.from_bytes(self._buffer[offset:offset + 2], "little")

    def _read_u32(self, offset: int) -> int:
        return int.from_bytes(self._buffer[offset:offset + 4], "little")


class Region(NamedTuple):
    """
    A contiguous span of an encoded message.

    ``data`` shorter than ``size`` is padded with 0xFF. Only ``stuffed``
    regions have their sentinel bytes doubled.
    """
    data: bytes
    size: int
    stuffed: bool = True


def marker(opcode: int) -> Region:
    """Sentinel followed by an opcode."""
    return Region(bytes([ESCAPE_CHAR, opcode]), 2, stuffed=False)


def block(data: bytes, size: Optional[int] = None) -> Region:
    """A byte payload rendered into a region of ``size`` bytes."""
    return Region(data, len(data) if size is None else size)


def u8(value: int) -> Region:
    return _int_region(value, 1)


def le16(value: int) -> Region:
    return _int_region(value, 2)


def le32(value: int) -> Region:
    return _int_region(value, 4)


def _int_region(value: int, width: int) -> Region:
    try:
        data = int(value).to_bytes(width, "little")
    except OverflowError:
        raise BadArgumentsError(f"{value} does not fit in {width} byte(s)") from None
    return Region(data, width)


class FrameEncoder:
    """
    Lazy byte producer over a sequence of regions.

    Iterating yields the wire bytes one at a time. Once exhausted it stays
    exhausted.
    """

    def __init__(self, regions: Sequence[Region]):
        self._regions = tuple(regions)
        self._region = 0
        self._offset = 0
        self._sent_escape = False

    def __iter__(self):
        return self

    def __next__(self) -> int:
        while self._region < len(self._regions):
            region = self._regions[self._region]
            if self._offset < region.size:
                if self._offset < len(region.data):
                    byte = region.data[self._offset]
                else:
                    byte = PAD_BYTE
                if region.stuffed and byte == ESCAPE_CHAR and not self._sent_escape:
                    # Emit the first copy; the cursor stays put for the second.
                    self._sent_escape = True
                    return byte
                self._sent_escape = False
                self._offset += 1
                return byte
            self._region += 1
            self._offset = 0
        raise StopIteration
