# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Serial transport for talking to a Tock bootloader.

Sends one command at a time and decodes the bootloader's answer. For
ReadRange/ExReadRange, whose responses carry no length, the transport arms
the response decoder with the length it asked for.
"""

import logging
import time
from pathlib import Path
from typing import Callable, Optional, Tuple, Type

import serial

from . import commands, responses
from .commands import Command
from .crc32 import crc32
from .decoder import ResponseDecoder
from .encoder import encode_command
from .errors import CodecError
from .protocol import INT_PAGE_SIZE, KEY_LEN, PAD_BYTE, BaudMode
from .responses import ERROR_RESPONSES, Response

logger = logging.getLogger(__name__)

# Largest read issued in one request; must fit the decoder's scratch buffer.
MAX_READ_CHUNK = INT_PAGE_SIZE


class TransportError(Exception):
    """Base exception for transport errors."""
    pass


class TimeoutError(TransportError):
    """Timeout waiting for response."""
    pass


class ProtocolError(TransportError):
    """Malformed or unexpected response."""
    pass


class BootloaderError(TransportError):
    """The bootloader answered a command with an error response."""

    def __init__(self, command: Command, response: Response):
        super().__init__(f"{type(command).__name__} failed: {type(response).__name__}")
        self.command = command
        self.response = response


class UploadError(TransportError):
    """Error while flashing an image."""
    pass


class Transport:
    """
    Serial transport for the Tock bootloader.

    Can be used as a context manager:
        with Transport("/dev/ttyUSB0") as t:
            t.ping()
            print(t.info())
    """

    def __init__(
        self,
        port: str,
        baudrate: int = 115200,
        timeout: float = 5.0,
    ):
        """
        Open a connection to the bootloader.

        Args:
            port: Serial port path (e.g., "/dev/ttyUSB0")
            baudrate: Baud rate (default 115200)
            timeout: Read timeout in seconds (default 5.0)
        """
        self._ser = serial.Serial(port, baudrate, timeout=timeout)
        time.sleep(0.1)  # Let the device settle

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self):
        """Close the serial connection."""
        if self._ser and self._ser.is_open:
            self._ser.close()

    @property
    def port(self) -> str:
        """Return the serial port name."""
        return self._ser.port

    @property
    def baudrate(self) -> int:
        """Return the current baud rate of the port."""
        return self._ser.baudrate

    def _send(self, command: Command):
        """Encode and send one command."""
        frame = encode_command(command)
        logger.debug("-> %s (%d bytes)", type(command).__name__, len(frame))
        self._ser.write(frame)
        self._ser.flush()

    def _receive(self, payload_len: Optional[int] = None) -> Response:
        """
        Receive bytes until a response has been decoded.

        Args:
            payload_len: Expected payload length for ReadRange/ExReadRange

        Raises:
            TimeoutError: If the port times out before a full response
            ProtocolError: If the bytes do not form a valid response
        """
        decoder = ResponseDecoder()
        if payload_len is not None:
            decoder.set_payload_len(payload_len)
        while True:
            byte = self._ser.read(1)
            if not byte:
                raise TimeoutError("Timeout waiting for response")
            try:
                response = decoder.receive(byte[0])
            except CodecError as e:
                raise ProtocolError(f"Malformed response: {e}") from e
            if response is not None:
                logger.debug("<- %s", type(response).__name__)
                return response

    def _send_recv(self, command: Command, payload_len: Optional[int] = None) -> Response:
        """Send a command and receive its response."""
        self._send(command)
        return self._receive(payload_len)

    def _request(
        self,
        command: Command,
        expected: Type[Response],
        payload_len: Optional[int] = None,
    ) -> Response:
        """
        Send a command and check the type of the answer.

        Raises:
            BootloaderError: If the bootloader answered with an error
            ProtocolError: If the answer is of another type
        """
        resp = self._send_recv(command, payload_len)
        if isinstance(resp, ERROR_RESPONSES):
            logger.warning("%s rejected: %s", type(command).__name__, type(resp).__name__)
            raise BootloaderError(command, resp)
        if not isinstance(resp, expected):
            raise ProtocolError(f"Expected {expected.__name__}, got {type(resp).__name__}")
        return resp

    def send(self, command: Command) -> None:
        """Send a command without waiting for an answer."""
        self._send(command)

    def receive(self, payload_len: Optional[int] = None) -> Response:
        """Receive and decode one response."""
        return self._receive(payload_len)

    def ping(self) -> None:
        """Check that the bootloader is listening."""
        self._request(commands.Ping(), responses.Pong)

    def info(self) -> bytes:
        """Return the bootloader info block."""
        return self._request(commands.Info(), responses.Info).info

    def reset(self) -> None:
        """Ask the bootloader to clear its buffers. There is no answer."""
        self._send(commands.Reset())

    def erase_page(self, address: int) -> None:
        """Erase one 512 byte page of internal flash."""
        self._request(commands.ErasePage(address=address), responses.Ok)

    def write_page(self, address: int, data: bytes) -> None:
        """Write one 512 byte page of internal flash."""
        self._request(commands.WritePage(address=address, data=data), responses.Ok)

    def erase_ex_block(self, address: int) -> None:
        """Erase one 2048 byte block of external flash."""
        self._request(commands.EraseExBlock(address=address), responses.Ok)

    def write_ex_page(self, address: int, data: bytes) -> None:
        """Write one 256 byte page of external flash."""
        self._request(commands.WriteExPage(address=address, data=data), responses.Ok)

    def erase_ex_page(self, address: int) -> None:
        """Erase one 256 byte page of external flash."""
        self._request(commands.EraseExPage(address=address), responses.Ok)

    def ext_flash_init(self) -> None:
        """Initialise the external flash chip."""
        self._request(commands.ExtFlashInit(), responses.Ok)

    def crc_rx_buffer(self) -> Tuple[int, int]:
        """Return ``(length, crc)`` of the bootloader's RX buffer."""
        resp = self._request(commands.CrcRxBuffer(), responses.CrcRxBuffer)
        return resp.length, resp.crc

    def read_range(self, address: int, length: int) -> bytes:
        """Read ``length`` bytes of internal flash."""
        return self._read(commands.ReadRange, responses.ReadRange, address, length)

    def ex_read_range(self, address: int, length: int) -> bytes:
        """Read ``length`` bytes of external flash."""
        return self._read(commands.ExReadRange, responses.ExReadRange, address, length)

    def _read(self, command_type, response_type, address: int, length: int) -> bytes:
        data = bytearray()
        while len(data) < length:
            chunk = min(length - len(data), MAX_READ_CHUNK)
            command = command_type(address=address + len(data), length=chunk)
            resp = self._request(command, response_type, payload_len=chunk)
            data += resp.data
        return bytes(data)

    def set_attribute(self, index: int, key: bytes, value: bytes) -> None:
        """
        Store an attribute.

        Args:
            index: Attribute slot (0-16)
            key: Key of up to 8 bytes, null padded on the wire
            value: Value of up to 55 bytes
        """
        command = commands.SetAttr(index=index, key=key.ljust(KEY_LEN, b"\x00"), value=value)
        self._request(command, responses.Ok)

    def get_attribute(self, index: int) -> Tuple[bytes, bytes]:
        """Return ``(key, value)`` of the attribute at ``index``."""
        resp = self._request(commands.GetAttr(index=index), responses.GetAttr)
        return resp.key, resp.value

    def crc_int_flash(self, address: int, length: int) -> int:
        """Return the CRC-32 of a range of internal flash."""
        command = commands.CrcIntFlash(address=address, length=length)
        return self._request(command, responses.CrcIntFlash).crc

    def crc_ext_flash(self, address: int, length: int) -> int:
        """Return the CRC-32 of a range of external flash."""
        command = commands.CrcExtFlash(address=address, length=length)
        return self._request(command, responses.CrcExtFlash).crc

    def write_flash_user_pages(self, page1: int, page2: int) -> None:
        """Write the two flash user pages."""
        self._request(commands.WriteFlashUserPages(page1=page1, page2=page2), responses.Ok)

    def change_baud(self, baud: int) -> None:
        """
        Switch the bootloader and the port to a new baud rate.

        The new rate is confirmed with a second command at that rate. If
        the confirmation fails, the port goes back to the old rate.

        Raises:
            BootloaderError: If the bootloader refuses the rate
        """
        old = self._ser.baudrate
        self._request(commands.ChangeBaud(mode=BaudMode.SET, baud=baud), responses.Ok)
        self._ser.baudrate = baud
        try:
            self._request(commands.ChangeBaud(mode=BaudMode.VERIFY, baud=baud), responses.Ok)
        except TransportError:
            logger.warning("Baud rate %d not confirmed, reverting to %d", baud, old)
            self._ser.baudrate = old
            raise
        logger.debug("Baud rate changed from %d to %d", old, baud)

    def flash_image(
        self,
        address: int,
        image: bytes,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> int:
        """
        Write an image to internal flash and verify it.

        Args:
            address: Page-aligned start address
            image: Image data; the last page is padded with 0xFF
            progress_callback: Optional callback(bytes_written, total_bytes)

        Returns:
            CRC-32 of the image

        Raises:
            UploadError: If a page write fails or the CRC does not match
        """
        if address % INT_PAGE_SIZE:
            raise UploadError(f"Address 0x{address:08x} is not page aligned")

        size = len(image)
        fill = bytes([PAD_BYTE])
        for offset in range(0, size, INT_PAGE_SIZE):
            page = image[offset:offset + INT_PAGE_SIZE].ljust(INT_PAGE_SIZE, fill)
            try:
                self.write_page(address + offset, page)
            except BootloaderError as e:
                raise UploadError(
                    f"WritePage failed at 0x{address + offset:08x}: {type(e.response).__name__}"
                ) from e
            if progress_callback:
                progress_callback(min(offset + INT_PAGE_SIZE, size), size)

        expected = crc32(image)
        actual = self.crc_int_flash(address, size)
        if actual != expected:
            raise UploadError(f"CRC mismatch: expected 0x{expected:08x}, got 0x{actual:08x}")
        return expected

    def flash_file(
        self,
        path: Path,
        address: int,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> int:
        """
        Flash an image from a file.

        Returns:
            CRC-32 of the flashed image

        Raises:
            UploadError: If flashing fails
            FileNotFoundError: If the file does not exist
        """
        image = Path(path).read_bytes()
        return self.flash_image(address, image, progress_callback)
