# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""Exceptions raised by the tockloader protocol codec."""


class CodecError(Exception):
    """Base exception for encode/decode errors."""
    pass


class UnknownCommandError(CodecError):
    """The response decoder saw an opcode it does not recognise."""
    pass


class BadArgumentsError(CodecError):
    """A payload violates the structural constraints of its variant."""
    pass


class UnsetLengthError(CodecError):
    """A variable-length response arrived before its length was armed."""
    pass


class SetLengthError(CodecError):
    """An expected payload length was armed twice."""
    pass
