# -*- coding: utf-8 -*-
#
# GPL License and Copyright Notice ============================================
#  This file is part of xivdata.
#
#  xivdata is free software: you can redistribute it and/or
#  modify it under the terms of the GNU General Public License
#  as published by the Free Software Foundation, either version 3
#  of the License, or (at your option) any later version.
#
#  xivdata is distributed in the hope that it will be useful,
#  but WITHOUT ANY WARRANTY; without even the implied warranty of
#  MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
#  GNU General Public License for more details.
#
#  You should have received a copy of the GNU General Public License
#  along with xivdata.  If not, see <https://www.gnu.org/licenses/>.
#
#  xivdata copyright (C) 2018-2026 xivdata Team
#
# =============================================================================
"""Low level helpers shared by every other module: struct wrappers, string
decoding, debug printing, logs and progress meters."""
from __future__ import annotations

import io
import os
import struct
import sys
import traceback as _traceback

import chardet

from . import exception

# structure aliases
struct_error = struct.error

# Unicode ---------------------------------------------------------------------
#--decode unicode strings
#  Names coming out of external tools (record sources, archive indexes) do
#  not declare their encoding, these functions guess it
encodingOrder = (
    'ascii',    # Plain old ASCII (0-127)
    'utf8',
    'cp932',    # Japanese
    'cp949',    # Korean
    'gbk',      # GBK (simplified Chinese + some)
    'cp1252',   # English (extended ASCII)
    'UTF-16LE',
)

_encodingSwap = {
    # The encoding detector reports back some encodings that
    # are subsets of others.  Use the better encoding when
    # given the option
    # 'reported encoding':'actual encoding to use',
    'GB2312': 'gbk',        # Simplified Chinese
    'SHIFT_JIS': 'cp932',   # Japanese
    'windows-1252': 'cp1252',
    'windows-1251': 'cp1251',
    'utf-8': 'utf8',
}

# Encodings that we can't use because Python doesn't even support them
_blocked_encodings = {'EUC-TW'}

def getbestencoding(bitstream):
    """Tries to detect the encoding a bitstream was saved in.  Uses Mozilla's
       detection library to find the best match (heuristics)"""
    if not bitstream:
        # Default to UTF-8 if the stream we're given is empty and hence no
        # inference can be made (chardet returns None, which breaks when passed
        # to decode())
        return 'utf8', 1.0
    result = chardet.detect(bitstream)
    encoding_, confidence = result['encoding'], result['confidence']
    encoding_ = _encodingSwap.get(encoding_, encoding_)
    return encoding_, confidence

def decoder(byte_str, encoding=None, avoidEncodings=()) -> str:
    """Decode a byte string to unicode, using heuristics on encoding."""
    if isinstance(byte_str, str) or byte_str is None: return byte_str
    # Try the user specified encoding first
    if encoding:
        try: return str(byte_str, encoding)
        except UnicodeDecodeError: pass
    # Try to detect the encoding next
    encoding, confidence = getbestencoding(byte_str)
    if encoding and confidence >= 0.55 and (
            encoding not in avoidEncodings or confidence == 1.0) and (
            encoding not in _blocked_encodings):
        try: return str(byte_str, encoding)
        except UnicodeDecodeError: pass
    # If even that fails, fall back to the old method, trial and error
    for encoding in encodingOrder:
        try: return str(byte_str, encoding)
        except UnicodeDecodeError: pass
    raise UnicodeDecodeError('ascii', byte_str, 0, len(byte_str),
                             'could not be decoded using any method')

# Structure wrappers ----------------------------------------------------------
# All game formats handled here are little endian, whatever the host is
class _StructsCache(dict):
    __slots__ = ()
    def __missing__(self, key):
        return self.setdefault(key, struct.Struct(key))

structs_cache = _StructsCache()
def unpack_short(ins, __unpack=structs_cache['<H'].unpack) -> int:
    return __unpack(ins.read(2))[0]
def pack_short(out, val: int, __pack=structs_cache['<H'].pack):
    out.write(__pack(val))
def pack_short_signed(out, val: int, __pack=structs_cache['<h'].pack):
    out.write(__pack(val))
def pack_int_signed(out, val: int, __pack=structs_cache['<i'].pack):
    out.write(__pack(val))

# Debug printing --------------------------------------------------------------
_USER_DIR = os.path.expanduser('~')
_CENSORED_DIR = os.path.join(os.path.split(_USER_DIR)[0], '*****')

def deprint(*args, traceback=False, trace=True, frame=1):
    """Prints message along with file and line location.
       Available keyword arguments:
       trace: (default True) - if a Truthy value, displays the module,
              line number, and function this was used from
       traceback: (default False) - if a Truthy value, prints any tracebacks
              for exceptions that have occurred.
       frame: (default 1) - With `trace`, determines the function caller's
              frame for getting the function name
    """
    if trace:
        parent_frame = sys._getframe(frame)
        code_obj = parent_frame.f_code
        msg = f'{os.path.basename(code_obj.co_filename)} ' \
              f'{parent_frame.f_lineno:4d} {code_obj.co_name}: '
    else:
        msg = ''
    msg += ' '.join([f'{x}' for x in args])
    # Print to stdout by default, but change to stderr if we have an error
    target_stream = sys.stdout
    if traceback:
        target_stream = sys.stderr
        exc_fmt = _traceback.format_exc()
        msg += f'\n{exc_fmt}'
    msg = msg.replace(_USER_DIR, _CENSORED_DIR)
    print(msg, flush=True, file=target_stream)

# Log/Progress ----------------------------------------------------------------
#------------------------------------------------------------------------------
class Log(object):
    """Log Callable. This is the abstract/null version. Useful version should
    override write functions.

    Log is divided into sections with headers. Header text is assigned (through
    setHeader), but isn't written until a message is written under it. I.e.,
    if no message are written under a given header, then the header itself is
    never written."""

    def __init__(self):
        """Initialize."""
        self.header = None
        self.prevHeader = None
        self.doFooter = True

    def setHeader(self, header, writeNow=False, doFooter=True):
        """Sets the header."""
        self.header = header
        if self.prevHeader:
            self.prevHeader += 'x'
        self.doFooter = doFooter
        if writeNow: self()

    def __call__(self, message=None, appendNewline=True):
        """Callable. Writes message, and if necessary, header and footer."""
        if self.header != self.prevHeader:
            if self.prevHeader and self.doFooter:
                self.writeFooter()
            if self.header:
                self.writeLogHeader(self.header)
            self.prevHeader = self.header
        if message: self.writeMessage(message, appendNewline)

    #--Abstract/null writing functions...
    def writeLogHeader(self, header):
        """Write header. Abstract/null version."""
    def writeFooter(self):
        """Write footer. Abstract/null version."""
    def writeMessage(self, message, appendNewline):
        """Write message to log. Abstract/null version."""

#------------------------------------------------------------------------------
class LogFile(Log):
    """Log that writes messages to a text stream."""
    def __init__(self, out=None):
        self.out = io.StringIO() if out is None else out
        Log.__init__(self)

    def writeLogHeader(self, header):
        self.out.write(header + '\n')

    def writeFooter(self):
        self.out.write('\n')

    def writeMessage(self, message, appendNewline):
        self.out.write(message)
        if appendNewline: self.out.write('\n')

#------------------------------------------------------------------------------
class Progress(object):
    """Progress Callable: Shows progress when called."""
    def __init__(self, full=1.0):
        if not full: raise exception.ArgumentError('Full must be non-zero!')
        self.message = ''
        self.full = 1.0 * full
        self.state = 0

    def setFull(self, full):
        """Sets full and for convenience, returns self."""
        if not full: raise exception.ArgumentError('Full must be non-zero!')
        self.full = 1.0 * full
        return self

    def plus(self, increment=1):
        """Increments progress by 1."""
        self.__call__(self.state + increment)

    def __call__(self, state, message=''):
        """Update progress with current state. Progress is state/full."""
        if message: self.message = message
        self._do_progress(1.0 * state / self.full, self.message)
        self.state = state

    def _do_progress(self, state, message):
        """Default _do_progress does nothing."""

    # __enter__ and __exit__ for use with the 'with' statement
    def __enter__(self): return self
    def __exit__(self, exc_type, exc_value, exc_traceback): pass
