# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""Pytest configuration for integration tests."""

import pytest


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--device",
        action="store",
        default=None,
        help="Serial port of a board in bootloader mode (e.g., /dev/ttyACM0)",
    )
    parser.addoption(
        "--baud",
        action="store",
        type=int,
        default=115200,
        help="Baud rate the bootloader listens at",
    )
    parser.addoption(
        "--scratch-address",
        action="store",
        default=None,
        help="Page-aligned internal flash address that tests may overwrite",
    )


@pytest.fixture(scope="session")
def device_port(request):
    """Get the device port, skipping hardware tests when absent."""
    port = request.config.getoption("--device")
    if port is None:
        pytest.skip("No device specified (use --device)")
    return port


@pytest.fixture(scope="session")
def scratch_address(request):
    """Get the flash address tests may write, skipping if not given."""
    address = request.config.getoption("--scratch-address")
    if address is None:
        pytest.skip("No scratch address specified (use --scratch-address)")
    return int(address, 0)


@pytest.fixture
def transport(request, device_port):
    """
    Create a transport connection to the bootloader.

    Function-scoped so each test starts with a fresh connection. The
    bootloader's buffers are cleared before the test runs.
    """
    from tockloader_proto.transport import Transport

    transport = Transport(device_port, baudrate=request.config.getoption("--baud"), timeout=5.0)
    transport.reset()
    yield transport
    transport.close()
