# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
CRC-32 (ISO HDLC / IEEE 802.3).

The bootloader answers CrcIntFlash and CrcExtFlash with this checksum,
so a host can verify a flashed range without reading it back.
"""

_POLY = 0xEDB88320


def _make_table():
    table = []
    for i in range(256):
        crc = i
        for _ in range(8):
            crc = (crc >> 1) ^ _POLY if crc & 1 else crc >> 1
        table.append(crc)
    return tuple(table)


_CRC32_TABLE = _make_table()


def crc32(data: bytes, crc: int = 0) -> int:
    """
    Compute a CRC-32 checksum.

    Args:
        data: Bytes to checksum
        crc: Result of a previous call, to continue over concatenated data

    Returns:
        32-bit CRC value
    """
    crc ^= 0xFFFFFFFF
    for byte in data:
        crc = _CRC32_TABLE[(crc ^ byte) & 0xFF] ^ (crc >> 8)
    return crc ^ 0xFFFFFFFF
