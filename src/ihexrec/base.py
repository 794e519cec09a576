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

r"""Shared type aliases and token helpers."""

from typing import Any
from typing import Mapping
from typing import Union

import colorama

try:
    from typing import TypeAlias
except ImportError:  # pragma: no cover
    TypeAlias = Any  # Python < 3.10

AnyBytes: TypeAlias = Union[bytes, bytearray, memoryview]
AnyLine: TypeAlias = Union[str, bytes, bytearray, memoryview]

TOKEN_COLOR_CODES: Mapping[str, bytes] = {
    '':         colorama.Style.RESET_ALL.encode(),
    '<':        colorama.Style.RESET_ALL.encode(),
    'begin':    colorama.Fore.YELLOW.encode(),
    'count':    colorama.Fore.BLUE.encode(),
    'address':  colorama.Fore.RED.encode(),
    'kind':     colorama.Fore.GREEN.encode(),
    'data':     colorama.Fore.CYAN.encode(),
    'dataalt':  colorama.Fore.LIGHTCYAN_EX.encode(),
    'checksum': colorama.Fore.MAGENTA.encode(),
    'end':      colorama.Style.RESET_ALL.encode(),
    '>':        colorama.Style.RESET_ALL.encode(),
}
r"""ANSI color code of each :meth:`ihexrec.record.Record.to_tokens` key.

``<`` and ``>`` are the codes wrapping the whole record, ``dataalt``
colors every other data byte, and the empty key covers unknown tokens.
"""


def colorize_tokens(
    tokens: Mapping[str, bytes],
    altdata: bool = True,
) -> Mapping[str, bytes]:
    r"""Colorizes record tokens with ANSI codes.

    Each non-empty token of a record (``begin``, ``count``, ``address``,
    ``kind``, ``data``, ``checksum``, ``end``) gets the code of
    :data:`TOKEN_COLOR_CODES` for its key prepended.
    The result starts with the ``<`` code and ends with the ``>`` one.

    Args:
        tokens (dict):
            Token byte strings, as by
            :meth:`ihexrec.record.Record.to_tokens`.

        altdata (bool):
            Data bytes alternate between the ``data`` and ``dataalt``
            codes, for readability of long records.

    Returns:
        dict: Colorized tokens, in the same order.

    Examples:
        >>> from ihexrec.base import colorize_tokens
        >>> from ihexrec import Record
        >>> from pprint import pprint

        >>> tokens = Record.create_end_of_file().to_tokens()
        >>> pprint(colorize_tokens(tokens))  # doctest: +NORMALIZE_WHITESPACE
        {'<': b'\x1b[0m',
         '>': b'\x1b[0m',
         'address': b'\x1b[31m0000',
         'begin': b'\x1b[33m:',
         'checksum': b'\x1b[35mFF',
         'count': b'\x1b[34m00',
         'end': b'\x1b[0m\n',
         'kind': b'\x1b[32m01'}
    """

    codes = TOKEN_COLOR_CODES
    colorized = {'<': codes['<']}

    for key, token in tokens.items():
        if not token:
            continue
        if key not in codes:
            key = ''

        if key == 'data' and altdata:
            even, odd = codes['data'], codes['dataalt']
            pairs = (((odd if i & 2 else even) + token[i:(i + 2)])
                     for i in range(0, len(token) - 1, 2))
            colorized[key] = b''.join(pairs)
        else:
            colorized[key] = codes[key] + token

    colorized['>'] = codes['>']
    return colorized
