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
"""Access to IMC files stored in the game archives. The archives themselves
(index lookups, block compression, dat files) are handled by an ArchiveStore
implementation - this module only resolves paths, and decodes or encodes what
comes out of and goes into the store."""
from __future__ import annotations

__author__ = 'xivdata Team'

import posixpath
from dataclasses import dataclass
from enum import Enum

from . import bass
from .bolt import deprint
from .exception import ArchiveError, ArchiveNotFoundError, ImcError
from .imc import FullImcInfo, ImcEntry, read_imc, write_imc

class ArchiveStore(object):
    """Abstract interface to the game archives. Offset 0 means that the path
    is not stored in the archives."""

    def get_data_offset(self, path: str) -> int:
        """Returns the offset at which the file at path is stored, or 0 if it
        is not stored at all."""
        raise NotImplementedError

    def read_type2_data(self, offset: int, data_file: str) -> bytes:
        """Reads and decompresses the block stored at offset in the
        specified data partition."""
        raise NotImplementedError

    def import_type2_data(self, data: bytes, item_name: str, path: str,
                          category: str, source: str):
        """Compresses data and stores it as the new contents of path."""
        raise NotImplementedError

class MemoryArchiveStore(ArchiveStore):
    """An ArchiveStore kept entirely in memory. Offsets are handed out in
    ascending order and stay valid for the lifetime of the store."""
    _first_offset = 0x08
    _offset_step = 0x80

    def __init__(self, initial_files: dict[str, bytes] | None = None):
        self._offsets: dict[str, int] = {}
        self._blocks: dict[int, bytes] = {}
        # path -> (item_name, category, source) of the last import
        self.import_log: dict[str, tuple[str, str, str]] = {}
        for file_path, file_data in (initial_files or {}).items():
            self.add_file(file_path, file_data)

    def add_file(self, path: str, data: bytes):
        """Stores data at path, allocating an offset if needed."""
        if not (file_offset := self._offsets.get(path)):
            file_offset = self._first_offset + len(self._offsets) * \
                          self._offset_step
            self._offsets[path] = file_offset
        self._blocks[file_offset] = bytes(data)

    def get_data_offset(self, path):
        return self._offsets.get(path, 0)

    def read_type2_data(self, offset, data_file):
        try:
            return self._blocks[offset]
        except KeyError:
            raise ArchiveError(data_file, f'No block stored at offset '
                                          f'0x{offset:X}')

    def import_type2_data(self, data, item_name, path, category, source):
        self.add_file(path, data)
        self.import_log[path] = (item_name, category, source)

# Items -----------------------------------------------------------------------
class ItemType(Enum):
    """The primary item types that own IMC files."""
    EQUIPMENT = 'equipment'
    ACCESSORY = 'accessory'
    WEAPON = 'weapon'
    MONSTER = 'monster'
    DEMIHUMAN = 'demihuman'
    HUMAN = 'human'
    UNKNOWN = 'unknown'

@dataclass(slots=True)
class ItemModelInfo:
    """The parts of an item's model information needed to find and address
    its IMC entries."""
    # The folder the item's model lives in, e.g. chara/equipment/e0001
    root_folder: str
    item_type: ItemType
    primary_id: int
    secondary_id: int = 0
    # 1-based IMC subset ID, values < 1 address the default subset
    imc_subset_id: int = 0
    # Slot abbreviation, e.g. 'top'
    slot: str = ''
    # The other half of a dual wield item, used when this item has no IMC
    # file of its own
    paired_item: ItemModelInfo | None = None

def get_imc_path(item: ItemModelInfo) -> tuple[str, str]:
    """Returns the (folder, file name) of the IMC file used by item. Items of
    a type that has no IMC files return two empty strings."""
    primary_id = f'{item.primary_id:04d}'
    secondary_id = f'{item.secondary_id:04d}'
    match item.item_type:
        case ItemType.EQUIPMENT:
            imc_file = f'e{primary_id}.imc'
        case ItemType.ACCESSORY:
            imc_file = f'a{primary_id}.imc'
        case ItemType.WEAPON | ItemType.MONSTER:
            imc_file = f'b{secondary_id}.imc'
        case ItemType.DEMIHUMAN:
            imc_file = f'e{secondary_id}.imc'
        case _:
            return '', ''
    return item.root_folder, imc_file

def _full_imc_path(item: ItemModelInfo) -> str:
    return '/'.join(get_imc_path(item))

# IMC I/O ---------------------------------------------------------------------
class ImcFiles(object):
    """Reads and writes IMC files through an ArchiveStore."""

    def __init__(self, store: ArchiveStore, data_file: str | None = None):
        self._store = store
        self._data_file = data_file or bass.inisettings['Archive'][
            'data_file']

    def _get_offset(self, path):
        if not (imc_offset := self._store.get_data_offset(path)):
            deprint(f'Could not find offset for {path}')
            raise ArchiveNotFoundError(path)
        return imc_offset

    def get_full_imc_info(self, path: str) -> FullImcInfo:
        """Reads and decodes the IMC file stored at path."""
        imc_offset = self._get_offset(path)
        imc_data = self._store.read_type2_data(imc_offset, self._data_file)
        return read_imc(imc_data, path)

    def save_full_imc_info(self, info: FullImcInfo, path: str,
                           item_name: str | None = None,
                           category: str | None = None,
                           source: str | None = None):
        """Encodes info and stores it as the IMC file at path. Only existing
        IMC files may be overwritten, new ones can't be created."""
        self._get_offset(path)
        imc_data = write_imc(info)
        imc_settings = bass.inisettings['Imc']
        self._store.import_type2_data(imc_data,
            item_name or posixpath.basename(path), path,
            category or imc_settings['category'],
            source or imc_settings['source'])
        deprint(f'Wrote {path} ({info.subset_count} subsets)')

    def save_imc_entry(self, info: ImcEntry, path: str, subset_id: int = -1,
                       slot: str = ''):
        """Replaces a single entry of the IMC file at path."""
        full_info = self.get_full_imc_info(path)
        full_info.set_entry(info, subset_id, slot)
        self.save_full_imc_info(full_info, path)

    # Item based access - some dual wield items don't have a second IMC file
    # and use the one of the item they're paired with
    def get_full_item_imc_info(self, item: ItemModelInfo) -> FullImcInfo:
        try:
            return self.get_full_imc_info(_full_imc_path(item))
        except (ArchiveError, ImcError):
            if item.paired_item is None:
                raise
            deprint(f'No usable IMC file for {_full_imc_path(item)}, '
                    f'falling back to the paired item')
            return self.get_full_imc_info(_full_imc_path(item.paired_item))

    def get_item_imc_info(self, item: ItemModelInfo) -> ImcEntry:
        """Returns the IMC entry used by the item's subset ID and slot."""
        full_info = self.get_full_item_imc_info(item)
        return full_info.get_entry(item.imc_subset_id, item.slot)

    def save_full_item_imc_info(self, info: FullImcInfo,
                                item: ItemModelInfo):
        try:
            self.save_full_imc_info(info, _full_imc_path(item))
        except (ArchiveError, ImcError):
            if item.paired_item is None:
                raise
            deprint(f'No usable IMC file for {_full_imc_path(item)}, '
                    f'falling back to the paired item')
            self.save_full_imc_info(info, _full_imc_path(item.paired_item))

    def save_item_imc_info(self, info: ImcEntry, item: ItemModelInfo):
        """Replaces the IMC entry used by the item's subset ID and slot."""
        full_info = self.get_full_item_imc_info(item)
        full_info.set_entry(info, item.imc_subset_id, item.slot)
        self.save_full_item_imc_info(full_info, item)
