# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
BDD-style integration tests against a board running the Tock bootloader.

These tests require a physical board in bootloader mode.
Run with: pytest tests/test_integration.py -v --device /dev/ttyACM0

Flash-writing scenarios also need a page the tests may overwrite:
    pytest tests/test_integration.py --device /dev/ttyACM0 --scratch-address 0x70000

Features tested:
- Ping and info
- Flash reads and CRCs
- Attributes
- Page write and verify
"""

import pytest

from tockloader_proto import crc32, responses
from tockloader_proto.protocol import INT_PAGE_SIZE
from tockloader_proto.transport import BootloaderError

pytestmark = pytest.mark.integration


class TestBootloaderPresence:
    """Feature: Talk to the bootloader."""

    def test_ping(self, transport):
        """Scenario: The bootloader answers a ping."""
        # Given the board is in bootloader mode
        # When I send a Ping
        # Then I receive a Pong
        transport.ping()

    def test_info(self, transport):
        """Scenario: The bootloader reports an info block."""
        info = transport.info()
        assert len(info) > 0
        print(f"Info: {info!r}")

    def test_crc_rx_buffer(self, transport):
        """Scenario: The RX buffer CRC is reported."""
        length, crc = transport.crc_rx_buffer()
        assert 0 <= length <= 0xFFFF
        assert 0 <= crc <= 0xFFFFFFFF


class TestFlashRead:
    """Feature: Read internal flash."""

    def test_read_matches_crc(self, transport):
        """Scenario: Data read back checks the same as the bootloader's CRC."""
        data = transport.read_range(0, 1024)
        assert len(data) == 1024
        assert transport.crc_int_flash(0, 1024) == crc32(data)

    def test_read_small(self, transport):
        """Scenario: Reads shorter than a page."""
        assert len(transport.read_range(0, 16)) == 16


class TestAttributes:
    """Feature: Read bootloader attributes."""

    def test_get_attribute(self, transport):
        """Scenario: Every attribute slot can be read."""
        for index in range(16):
            key, value = transport.get_attribute(index)
            assert len(key) == 8
            assert len(value) <= 55

    def test_get_attribute_out_of_range(self, transport):
        """Scenario: A slot past the end is rejected."""
        with pytest.raises(BootloaderError) as exc_info:
            transport.get_attribute(200)
        assert isinstance(exc_info.value.response, responses.BadArguments)


class TestFlashWrite:
    """Feature: Write internal flash."""

    def test_write_and_verify(self, transport, scratch_address):
        """Scenario: A page written is read back unchanged."""
        page = bytes(range(256)) * (INT_PAGE_SIZE // 256)
        transport.write_page(scratch_address, page)
        assert transport.read_range(scratch_address, INT_PAGE_SIZE) == page

    def test_flash_image(self, transport, scratch_address):
        """Scenario: A short image is flashed and CRC-checked."""
        image = b"\xFC\x00" * 300
        assert transport.flash_image(scratch_address, image) == crc32(image)

    def test_unaligned_write(self, transport, scratch_address):
        """Scenario: A misaligned page write is rejected by the bootloader."""
        with pytest.raises(BootloaderError):
            transport.write_page(scratch_address + 1, b"\x00" * INT_PAGE_SIZE)
