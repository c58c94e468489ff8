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
"""This module contains all custom exceptions for xivdata."""

# NO LOCAL IMPORTS! This has to be importable from any module/package.

class BoltError(Exception):
    """Generic error with a string message."""
    def __init__(self, message):
        self.message = message
    def __str__(self):
        return self.message

# Code errors -----------------------------------------------------------------
class ArgumentError(BoltError):
    """Coding Error: Argument out of allowed range of values."""
    def __init__(self, message='Argument is out of allowed ranged of values.'):
        super(ArgumentError, self).__init__(message)

class StateError(BoltError):
    """Error: Object is corrupted."""
    def __init__(self, message='Object is in a bad state.'):
        super(StateError, self).__init__(message)

# File exceptions -------------------------------------------------------------
class FileError(BoltError):
    """An error that occurred while handling a file."""
    def __init__(self, in_name, message):
        ## type: (str, str) -> None
        super(FileError, self).__init__(message)
        self._in_name = (in_name and '%s' % in_name) or 'Unknown File'

    def __str__(self):
        return f'{self._in_name}: {self.message}'

# Archive exceptions ----------------------------------------------------------
class ArchiveError(FileError):
    """An error raised by or on behalf of the game archive store."""

class ArchiveNotFoundError(ArchiveError):
    """The requested path has no stored offset in the archive index."""
    def __init__(self, in_name):
        super(ArchiveNotFoundError, self).__init__(in_name,
            'Could not find offset in the archive index')

# IMC exceptions --------------------------------------------------------------
class ImcError(FileError):
    """An error while decoding or encoding an IMC buffer."""

class UnsupportedImcError(ImcError):
    """Unknown IMC type identifier."""
    def __init__(self, in_name, type_tag):
        super(UnsupportedImcError, self).__init__(in_name,
            f'Unknown IMC type identifier {type_tag}')
        self.type_tag = type_tag

class ImcReadError(ImcError):
    """Attempt to read past the end of an IMC buffer."""
    def __init__(self, in_name, try_pos, max_pos):
        ## type: (str, int, int) -> None
        super(ImcReadError, self).__init__(in_name,
            f'Attempted to read past ({try_pos}) end ({max_pos}) of '
            f'buffer.')
        self.try_pos = try_pos
        self.max_pos = max_pos

# Model exceptions ------------------------------------------------------------
class ModelError(BoltError):
    """An error while building or exporting a model."""

class CapacityExceededError(ModelError):
    """A model or mesh group references more entries than the engine's fixed
    size tables can hold."""
    def __init__(self, what, count, limit):
        ## type: (str, int, int) -> None
        super(CapacityExceededError, self).__init__(
            f'{what}: {count} entries exceed the limit of {limit}')
        self.count = count
        self.limit = limit

class MalformedRecordStreamError(ModelError):
    """A record source yielded a row inconsistent with the structure built
    from the rows before it."""
