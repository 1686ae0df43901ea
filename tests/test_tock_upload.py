# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""Tests for the tock_upload command-line tool."""

import argparse

import pytest
from unittest.mock import Mock, patch

import tock_upload
from tockloader_proto.errors import BadArgumentsError


class TestSetAttr:
    """Tests for the set-attr subcommand."""

    def test_ascii(self):
        """Key and value are sent as bytes."""
        transport = Mock()
        args = argparse.Namespace(index=2, key="board", value="nrf52dk")

        tock_upload.cmd_set_attr(transport, args)

        transport.set_attribute.assert_called_once_with(2, b"board", b"nrf52dk")

    def test_non_ascii(self):
        """Non-ASCII text is sent UTF-8 encoded."""
        transport = Mock()
        args = argparse.Namespace(index=0, key="größe", value="é")

        tock_upload.cmd_set_attr(transport, args)

        transport.set_attribute.assert_called_once_with(
            0, "größe".encode("utf-8"), b"\xc3\xa9"
        )

    @patch('tock_upload.Transport')
    def test_rejected_key_exits(self, mock_transport_class, monkeypatch, capsys):
        """A codec error is printed and exits with status 1."""
        transport = Mock()
        transport.set_attribute.side_effect = BadArgumentsError("SetAttr key must be 8 bytes")
        mock_transport_class.return_value = transport
        monkeypatch.setattr(
            "sys.argv",
            ["tock_upload.py", "--port", "/dev/ttyTEST", "set-attr", "0", "längerals8", "x"],
        )

        with pytest.raises(SystemExit) as exc_info:
            tock_upload.main()

        assert exc_info.value.code == 1
        assert "SetAttr key must be 8 bytes" in capsys.readouterr().out
        transport.close.assert_called_once()
