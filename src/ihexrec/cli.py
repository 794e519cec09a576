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

"""
Module that contains the command line app.

Why does this file exist, and why not put this in __main__?

  You might be tempted to import things from __main__ later, but that will cause
  problems: the code will get executed twice:

  - When you run `python -m ihexrec` python will execute
    ``__main__.py`` as a script. That means there won't be any
    ``ihexrec.__main__`` in ``sys.modules``.
  - When you import __main__ it will get executed again (as a module) because
    there's no ``ihexrec.__main__`` in ``sys.modules``.

  Also see (1) from https://click.palletsprojects.com/en/stable/setuptools/#setuptools-integration
"""

import logging
from typing import Mapping
from typing import Optional

import click

from .__init__ import __version__
from .errors import IhexError
from .errors import SinkError
from .errors import SourceError
from .grammar import FormatVariant
from .sequence import RecordSequence
from .utils import parse_int
from .writer import StreamingFileWriter

CHUNK_SIZE: int = 1 << 16
r"""Size of the chunks read from the input binary stream."""

VARIANTS: Mapping[str, FormatVariant] = {
    'i8hex': FormatVariant.I8HEX,
    'i16hex': FormatVariant.I16HEX,
    'i32hex': FormatVariant.I32HEX,
}


class BasedIntParamType(click.ParamType):
    name = 'integer'

    def convert(self, value, param, ctx):
        try:
            return parse_int(value)
        except ValueError:
            self.fail(f'invalid integer: {value!r}', param, ctx)


class ByteIntParamType(click.ParamType):
    name = 'byte'

    def convert(self, value, param, ctx):
        try:
            b = parse_int(value)
            if not 0 <= b <= 255:
                raise ValueError()
            return b
        except ValueError:
            self.fail(f'invalid byte: {value!r}', param, ctx)


BASED_INT = BasedIntParamType()
BYTE_INT = ByteIntParamType()

FILE_PATH_IN = click.Path(dir_okay=False, allow_dash=True, readable=True, exists=True)
FILE_PATH_OUT = click.Path(dir_okay=False, allow_dash=True, writable=True)

VARIANT_CHOICE = click.Choice(list(VARIANTS.keys()), case_sensitive=False)


# ----------------------------------------------------------------------------

def load_sequence(
    infile: str,
    variant: str,
    strict: bool = False,
) -> RecordSequence:

    with click.open_file(infile, 'rb') as stream:
        try:
            return RecordSequence.decode_stream(stream, VARIANTS[variant.lower()], strict=strict)
        except (IhexError, SourceError) as exc:
            raise click.ClickException(str(exc)) from exc


def print_version(ctx, _, value):

    if not value or ctx.resilient_parsing:
        return

    click.echo(str(__version__))
    ctx.exit()


# ============================================================================

@click.group()
@click.option('-v', '--verbose', is_flag=True, help="""
    Logs debug messages onto standard error.
""")
@click.option('--version', is_flag=True, is_eager=True, expose_value=False,
              callback=print_version, help="""
    Prints the package version number.
""")
def main(verbose: bool) -> None:
    """
    Command line utilities for Intel HEX files.

    Being built with `Click <https://click.palletsprojects.com/en/stable/>`_, all the
    commands follow POSIX-like syntax rules, as well as reserving the virtual
    file path ``-`` for command chaining via standard output/input buffering.
    """

    if verbose:
        logging.basicConfig(level=logging.DEBUG)


# ----------------------------------------------------------------------------

@main.command()
@click.option('-f', '--variant', type=VARIANT_CHOICE, default='i32hex', show_default=True, help="""
    Intel HEX format variant.
""")
@click.option('-s', '--start', type=BASED_INT, help="""
    Inclusive start address of the output image.
    If omitted, it starts from the lowest data address.
""")
@click.option('-v', '--value', type=BYTE_INT, default=0, show_default=True, help="""
    Byte value used to fill the gaps between data records.
""")
@click.option('--strict', is_flag=True, help="""
    Rejects unknown record kinds.
""")
@click.argument('infile', type=FILE_PATH_IN)
@click.argument('outfile', type=FILE_PATH_OUT)
def decode(
    variant: str,
    start: Optional[int],
    value: int,
    strict: bool,
    infile: str,
    outfile: str,
) -> None:
    r"""Converts an Intel HEX file into a binary file.

    ``INFILE`` is the path of the input Intel HEX file.
    Set to ``-`` to read from standard input.

    ``OUTFILE`` is the path of the output binary file.
    Set to ``-`` to write to standard output.
    """

    sequence = load_sequence(infile, variant, strict=strict)
    memory = sequence.to_memory()
    chunk = memory.extract(start=start, pattern=value).to_bytes()

    with click.open_file(outfile, 'wb') as stream:
        stream.write(chunk)


# ----------------------------------------------------------------------------

@main.command()
@click.option('-f', '--variant', type=VARIANT_CHOICE, default='i32hex', show_default=True, help="""
    Intel HEX format variant.
""")
@click.option('--color', is_flag=True, help="""
    Colorizes the record fields with ANSI codes.
""")
@click.option('--strict', is_flag=True, help="""
    Rejects unknown record kinds.
""")
@click.argument('infile', type=FILE_PATH_IN)
def dump(
    variant: str,
    color: bool,
    strict: bool,
    infile: str,
) -> None:
    r"""Prints the records of an Intel HEX file.

    ``INFILE`` is the path of the input Intel HEX file.
    Set to ``-`` to read from standard input.
    """

    sequence = load_sequence(infile, variant, strict=strict)
    stream = click.get_binary_stream('stdout')

    for record in sequence:
        record.print(stream=stream, color=color)


# ----------------------------------------------------------------------------

@main.command()
@click.option('-f', '--variant', type=VARIANT_CHOICE, default='i32hex', show_default=True, help="""
    Intel HEX format variant.
""")
@click.option('-s', '--record-size', type=click.IntRange(1, 255), default=16, show_default=True, help="""
    Number of data bytes per record.
""")
@click.option('--start-address', type=BASED_INT, help="""
    Execution start address; emits a start address record.
""")
@click.argument('infile', type=FILE_PATH_IN)
@click.argument('outfile', type=FILE_PATH_OUT)
def encode(
    variant: str,
    record_size: int,
    start_address: Optional[int],
    infile: str,
    outfile: str,
) -> None:
    r"""Converts a binary file into an Intel HEX file.

    Binary data is laid out from address zero.

    ``INFILE`` is the path of the input binary file.
    Set to ``-`` to read from standard input.

    ``OUTFILE`` is the path of the output Intel HEX file.
    Set to ``-`` to write to standard output.
    """

    try:
        with click.open_file(infile, 'rb') as in_stream:
            with click.open_file(outfile, 'wb') as out_stream:
                writer = StreamingFileWriter(out_stream, record_size, VARIANTS[variant.lower()],
                                             start_address=start_address, close_sink=False)
                with writer:
                    for chunk in iter(lambda: in_stream.read(CHUNK_SIZE), b''):
                        writer.write(chunk)

    except (ValueError, SinkError) as exc:
        raise click.ClickException(str(exc)) from exc


# ----------------------------------------------------------------------------

@main.command()
@click.option('-f', '--variant', type=VARIANT_CHOICE, default='i32hex', show_default=True, help="""
    Intel HEX format variant.
""")
@click.option('--strict', is_flag=True, help="""
    Rejects unknown record kinds.
""")
@click.argument('infile', type=FILE_PATH_IN)
def validate(
    variant: str,
    strict: bool,
    infile: str,
) -> None:
    r"""Validates an Intel HEX file.

    ``INFILE`` is the path of the input Intel HEX file.
    Set to ``-`` to read from standard input.
    """

    load_sequence(infile, variant, strict=strict)
