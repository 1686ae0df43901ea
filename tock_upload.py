#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Command-line tool for the Tock bootloader over a serial port.

Usage:
    python tock_upload.py --port /dev/ttyUSB0 ping
    python tock_upload.py --port /dev/ttyUSB0 info
    python tock_upload.py --port /dev/ttyUSB0 flash app.bin --address 0x30000
    python tock_upload.py --port /dev/ttyUSB0 read 0x30000 64 --output dump.bin
    python tock_upload.py --port /dev/ttyUSB0 get-attr 0

Requirements:
    pip install pyserial
"""

import argparse
import logging
import sys
from pathlib import Path

try:
    import serial
except ImportError:
    print("Error: pyserial not installed. Run: pip install pyserial")
    sys.exit(1)

from tockloader_proto import CodecError, Transport, crc32
from tockloader_proto.transport import TransportError, UploadError


def parse_int(text: str) -> int:
    """Parse a decimal or 0x-prefixed integer."""
    return int(text, 0)


def cmd_ping(transport: Transport, args):
    """Check that the bootloader answers."""
    transport.ping()
    print("Pong")


def cmd_info(transport: Transport, args):
    """Print the bootloader info block."""
    info = transport.info()
    print(info.rstrip(b"\x00").decode("ascii", errors="replace"))


def cmd_read(transport: Transport, args):
    """Read a flash range and print or save it."""
    if args.external:
        data = transport.ex_read_range(args.address, args.length)
    else:
        data = transport.read_range(args.address, args.length)

    if args.output:
        args.output.write_bytes(data)
        print(f"Wrote {len(data)} bytes to {args.output}")
        return

    for offset in range(0, len(data), 16):
        row = data[offset:offset + 16]
        print(f"{args.address + offset:08x}  {row.hex(' ')}")


def cmd_erase(transport: Transport, args):
    """Erase one internal flash page."""
    print(f"Erasing page at 0x{args.address:08x}... ", end="", flush=True)
    transport.erase_page(args.address)
    print("OK")


def cmd_flash(transport: Transport, args):
    """Write an image to internal flash and verify it."""
    image = args.file.read_bytes()
    print(f"Image:   {args.file} ({len(image)} bytes, CRC32: 0x{crc32(image):08x})")
    print(f"Address: 0x{args.address:08x}")
    print()

    def progress(sent: int, total: int):
        pct = sent * 100 // total
        print(f"\rFlashing: {pct:3d}% ({sent}/{total} bytes)", end="", flush=True)

    try:
        transport.flash_image(args.address, image, progress_callback=progress)
    except UploadError as e:
        print(f"\nFAILED: {e}")
        return False

    print("\rFlashing: 100% - Verified!          ")
    return True


def cmd_crc(transport: Transport, args):
    """Print the CRC-32 of a flash range."""
    if args.external:
        crc = transport.crc_ext_flash(args.address, args.length)
    else:
        crc = transport.crc_int_flash(args.address, args.length)
    print(f"0x{crc:08x}")


def cmd_get_attr(transport: Transport, args):
    """Print one attribute."""
    key, value = transport.get_attribute(args.index)
    name = key.rstrip(b"\x00").decode("ascii", errors="replace")
    print(f"{args.index}: {name} = {value.decode('ascii', errors='replace')}")


def cmd_set_attr(transport: Transport, args):
    """Store one attribute."""
    transport.set_attribute(args.index, args.key.encode(), args.value.encode())
    print("OK")


def cmd_baud(transport: Transport, args):
    """Switch to a new baud rate."""
    transport.change_baud(args.rate)
    print(f"Baud rate is now {transport.baudrate}")


def main():
    parser = argparse.ArgumentParser(
        description="Serial tool for the Tock bootloader"
    )
    parser.add_argument(
        "--port", "-p",
        required=True,
        help="Serial port (e.g., /dev/ttyUSB0)"
    )
    parser.add_argument("--baud", type=int, default=115200,
                        help="Initial baud rate (default 115200)")
    parser.add_argument("--timeout", type=float, default=5.0,
                        help="Response timeout in seconds (default 5.0)")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log protocol traffic")

    subparsers = parser.add_subparsers(dest="command", required=True)

    sub = subparsers.add_parser("ping", help="Check the bootloader answers")
    sub.set_defaults(func=cmd_ping)

    sub = subparsers.add_parser("info", help="Print the bootloader info block")
    sub.set_defaults(func=cmd_info)

    sub = subparsers.add_parser("read", help="Read a flash range")
    sub.add_argument("address", type=parse_int)
    sub.add_argument("length", type=parse_int)
    sub.add_argument("--external", action="store_true", help="Read external flash")
    sub.add_argument("--output", "-o", type=Path, help="Save to a file instead of printing")
    sub.set_defaults(func=cmd_read)

    sub = subparsers.add_parser("erase", help="Erase an internal flash page")
    sub.add_argument("address", type=parse_int)
    sub.set_defaults(func=cmd_erase)

    sub = subparsers.add_parser("flash", help="Write an image to internal flash")
    sub.add_argument("file", type=Path, help="Binary image")
    sub.add_argument("--address", "-a", type=parse_int, required=True,
                     help="Page-aligned start address")
    sub.set_defaults(func=cmd_flash)

    sub = subparsers.add_parser("crc", help="CRC-32 of a flash range")
    sub.add_argument("address", type=parse_int)
    sub.add_argument("length", type=parse_int)
    sub.add_argument("--external", action="store_true", help="Use external flash")
    sub.set_defaults(func=cmd_crc)

    sub = subparsers.add_parser("get-attr", help="Read an attribute")
    sub.add_argument("index", type=int)
    sub.set_defaults(func=cmd_get_attr)

    sub = subparsers.add_parser("set-attr", help="Write an attribute")
    sub.add_argument("index", type=int)
    sub.add_argument("key")
    sub.add_argument("value")
    sub.set_defaults(func=cmd_set_attr)

    sub = subparsers.add_parser("baud", help="Change the baud rate")
    sub.add_argument("rate", type=int)
    sub.set_defaults(func=cmd_baud)

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "flash" and not args.file.exists():
        print(f"Error: File not found: {args.file}")
        sys.exit(1)

    try:
        transport = Transport(args.port, baudrate=args.baud, timeout=args.timeout)
    except serial.SerialException as e:
        print(f"Error opening {args.port}: {e}")
        sys.exit(1)

    try:
        if args.func(transport, args) is False:
            sys.exit(1)
    except (TransportError, CodecError) as e:
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        transport.close()


if __name__ == "__main__":
    main()
