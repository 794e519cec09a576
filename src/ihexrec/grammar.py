# Copyright (c) 2013-2025, Andrea Zoppi
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
# 1. Redistributions of source code must retain the above copyright notice,
#    this list of conditions and the following disclaimer.
#
# 2. Redistributions in binary form must reproduce the above copyright
#    notice, this list of conditions and the following disclaimer in the
#    documentation and/or other materials provided with the distribution.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
# AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
# IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE
# ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE
# LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR
# CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF
# SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS
# INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN
# CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE)
# ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.

r"""Intel HEX format variants and their record kind grammar.

======================  =============  =======================================
Variant                 Address space  Auxiliary record kinds
======================  =============  =======================================
:attr:`~I8HEX`          16 bits        none
:attr:`~I16HEX`         20 bits        Extended/Start Segment Address
:attr:`~I32HEX`         32 bits        Extended/Start Linear Address
======================  =============  =======================================

Data and End Of File records are legal for every variant.
"""

import enum
from typing import Any
from typing import FrozenSet
from typing import Mapping

from .errors import InvalidRecordKindError
from .record import RecordKind


class FormatVariant(enum.IntEnum):
    r"""Intel HEX format variant.

    The integer value is the nominal address width of the variant name.
    """

    I8HEX = 8
    r"""16-bit addressing."""

    I16HEX = 16
    r"""20-bit segmented addressing."""

    I32HEX = 32
    r"""32-bit linear addressing."""

    NARROW = I8HEX
    SEGMENTED = I16HEX
    LINEAR = I32HEX

    @property
    def address_space(self) -> int:
        r"""int: Size of the addressable space, in bytes.

        Examples:
            >>> hex(FormatVariant.I16HEX.address_space)
            '0x100000'
        """

        return ADDRESS_SPACES[self]


ADDRESS_SPACES: Mapping[FormatVariant, int] = {
    FormatVariant.I8HEX: 1 << 16,
    FormatVariant.I16HEX: 1 << 20,
    FormatVariant.I32HEX: 1 << 32,
}
r"""Addressable space of each variant."""

SEGMENT_SIZE: int = 1 << 16
r"""Size of the address window reachable by the 16-bit record offset."""

_COMMON_KINDS: FrozenSet[RecordKind] = frozenset([
    RecordKind.DATA,
    RecordKind.END_OF_FILE,
])

LEGAL_KINDS: Mapping[FormatVariant, FrozenSet[RecordKind]] = {
    FormatVariant.I8HEX: _COMMON_KINDS,
    FormatVariant.I16HEX: _COMMON_KINDS | {
        RecordKind.EXTENDED_SEGMENT_ADDRESS,
        RecordKind.START_SEGMENT_ADDRESS,
    },
    FormatVariant.I32HEX: _COMMON_KINDS | {
        RecordKind.EXTENDED_LINEAR_ADDRESS,
        RecordKind.START_LINEAR_ADDRESS,
    },
}
r"""Record kinds legal within each variant."""


def validate(kind: Any, variant: Any) -> bool:
    r"""Tells whether a record kind is legal within a format variant.

    Pure and total: unknown kinds or variants are just illegal, even if
    they are not hashable.

    Args:
        kind (:class:`RecordKind` or int):
            Record kind.

        variant (:class:`FormatVariant` or int):
            Format variant.

    Returns:
        bool: `kind` is legal for `variant`.

    Examples:
        >>> validate(RecordKind.EXTENDED_SEGMENT_ADDRESS, FormatVariant.I32HEX)
        False
        >>> validate(RecordKind.EXTENDED_SEGMENT_ADDRESS, FormatVariant.I16HEX)
        True
        >>> validate(0x42, FormatVariant.I32HEX)
        False
    """

    try:
        legal = LEGAL_KINDS.get(variant)
        if legal is None:
            return False
        return kind in legal
    except TypeError:  # unhashable
        return False


def check(kind: Any, variant: Any) -> None:
    r"""Raises :class:`InvalidRecordKindError` unless :func:`validate`."""

    if not validate(kind, variant):
        raise InvalidRecordKindError(kind, variant)


class FormatGrammar:
    r"""Namespace for the record kind grammar."""

    validate = staticmethod(validate)
    check = staticmethod(check)
