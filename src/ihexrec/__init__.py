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

__version__ = '0.1.0'

from .errors import ByteCountMismatchError
from .errors import ChecksumMismatchError
from .errors import DuplicateTerminatorError
from .errors import IhexError
from .errors import InvalidHexDigitsError
from .errors import InvalidRecordKindError
from .errors import InvalidStartCharacterError
from .errors import MissingTerminatorError
from .errors import ParseError
from .errors import RecordCountOverflowError
from .errors import RecordTooLongError
from .errors import SinkError
from .errors import SourceError
from .errors import TruncatedRecordError
from .errors import ValidationError
from .errors import WriteAfterCloseError
from .errors import WriterError
from .grammar import FormatGrammar
from .grammar import FormatVariant
from .record import Record
from .record import RecordKind
from .record import compute_checksum
from .record import decode
from .record import encode
from .sequence import RecordSequence
from .sequence import decode_stream
from .writer import StreamingFileWriter
from .writer import encode_bytes
