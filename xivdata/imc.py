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
"""IMC (item variant configuration) files. An IMC file maps the variants of
an equipment, accessory or weapon model to the per slot selectors used to
pick its material set, visibility mask and VFX.

Layout, all little endian:

    u16 subset_count
    u16 type_identifier  (1 = NonSet, 31 = Set)
    (1 + subset_count) * subset_size records of
        u8 variant, u8 unknown, u16 mask, u16 vfx

The first subset is the default one. A subset holds one record for NonSet
files (weapons, monsters) and five for Set files (the five equipment or
accessory slots). Nothing else is stored, the structure is entirely implied
by the header."""
from __future__ import annotations

__author__ = 'xivdata Team'

import io
from dataclasses import dataclass, field
from enum import IntEnum
from types import MappingProxyType
from typing import ClassVar

from .bolt import pack_short, struct_error, structs_cache, unpack_short
from .exception import ImcReadError, StateError, UnsupportedImcError

class ImcType(IntEnum):
    """The type identifier stored in the second header short."""
    UNKNOWN = 0
    NON_SET = 1
    SET = 31

# Number of records in each subset, keyed by type identifier
_subset_sizes = {ImcType.NON_SET: 1, ImcType.SET: 5}
_header_size = 4

# Slot abbreviation -> offset of its record inside a subset. Equipment and
# accessories each use their own family of five slots
SLOT_OFFSETS = MappingProxyType({
    'met': 0, # head
    'top': 1, # body
    'glv': 2, # hands
    'dwn': 3, # legs
    'sho': 4, # feet
    'ear': 0, # earrings
    'nek': 1, # necklace
    'wrs': 2, # bracelets
    'rir': 3, # right ring
    'ril': 4, # left ring
})

@dataclass(frozen=True, slots=True)
class ImcEntry:
    """A single IMC record: the selectors used by one slot of one
    variant."""
    _imc_struct: ClassVar = structs_cache['<2B2H']
    record_size: ClassVar[int] = _imc_struct.size
    variant: int = 0
    unknown: int = 0
    mask: int = 0
    vfx: int = 0

    @classmethod
    def load(cls, ins) -> ImcEntry:
        """Reads one record from the specified input stream."""
        return cls(*cls._imc_struct.unpack(ins.read(cls.record_size)))

    def get_bytes(self) -> bytes:
        return self._imc_struct.pack(self.variant, self.unknown, self.mask,
                                     self.vfx)

@dataclass(slots=True)
class FullImcInfo:
    """The complete contents of an IMC file."""
    type_identifier: ImcType
    # The default subset, always the one immediately following the header
    default_subset: list[ImcEntry] = field(default_factory=list)
    # Every other subset. An item's IMC subset ID is a 1-based index into
    # this list - it is NOT the same thing as the item's material variant
    subset_list: list[list[ImcEntry]] = field(default_factory=list)

    @classmethod
    def new(cls, type_identifier: ImcType) -> FullImcInfo:
        """Creates a table with no subsets and a zeroed default subset of
        the size type_identifier requires."""
        try:
            subset_size = _subset_sizes[type_identifier]
        except KeyError:
            raise UnsupportedImcError('', type_identifier)
        return cls(ImcType(type_identifier),
                   [ImcEntry() for _x in range(subset_size)])

    @property
    def subset_count(self) -> int:
        """The number of subsets, not counting the default one."""
        return len(self.subset_list)

    @property
    def subset_size(self) -> int:
        """The number of records in each subset, either 1 or 5."""
        return len(self.default_subset)

    def _resolve(self, subset_id, slot):
        """Return the subset list and record offset that subset_id and slot
        address. Out of range subset IDs address the default subset, unknown
        slots (or slots the subset is too small for) address offset 0."""
        subset_index = subset_id - 1
        if 0 <= subset_index < self.subset_count:
            subset = self.subset_list[subset_index]
        else:
            subset = self.default_subset
        slot_offset = SLOT_OFFSETS.get(slot, 0)
        if slot_offset >= len(subset):
            slot_offset = 0
        return subset, slot_offset

    def get_entry(self, subset_id: int = -1, slot: str = '') -> ImcEntry:
        """Retrieves the entry for the specified subset ID and slot
        abbreviation. Subset IDs are 1-based, anything outside
        [1, subset_count] retrieves the default subset."""
        subset, slot_offset = self._resolve(subset_id, slot)
        return subset[slot_offset]

    def set_entry(self, info: ImcEntry, subset_id: int = -1, slot: str = ''):
        """Replaces the entry that get_entry(subset_id, slot) would
        return."""
        subset, slot_offset = self._resolve(subset_id, slot)
        subset[slot_offset] = info

    def dump_to_log(self, log):
        """Dumps the whole table to the specified bolt.Log."""
        log.setHeader(f'IMC ({self.type_identifier.name}, '
                      f'{self.subset_count} subsets)')
        def _log_subset(subset_label, subset):
            log(f'  {subset_label}:')
            for slot_offset, imc_entry in enumerate(subset):
                log(f'    [{slot_offset}] variant={imc_entry.variant} '
                    f'unknown={imc_entry.unknown} '
                    f'mask=0x{imc_entry.mask:04X} vfx={imc_entry.vfx}')
        _log_subset('Default', self.default_subset)
        for subset_id, subset in enumerate(self.subset_list, start=1):
            _log_subset(f'Subset {subset_id}', subset)

# Codec -----------------------------------------------------------------------
def read_imc(imc_data: bytes, in_name='') -> FullImcInfo:
    """Decodes the full contents of an IMC file. The whole buffer must be
    available, a short buffer aborts the decode.

    :param imc_data: The raw (decompressed) file contents.
    :param in_name: The path of the file, for error messages."""
    max_pos = len(imc_data)
    if max_pos < _header_size:
        raise ImcReadError(in_name, _header_size, max_pos)
    ins = io.BytesIO(imc_data)
    subset_count = unpack_short(ins)
    type_tag = unpack_short(ins)
    try:
        type_identifier = ImcType(type_tag)
        subset_size = _subset_sizes[type_identifier]
    except (ValueError, KeyError):
        raise UnsupportedImcError(in_name, type_tag)
    expected_end = _header_size + ((subset_count + 1) * subset_size *
                                   ImcEntry.record_size)
    if max_pos < expected_end:
        raise ImcReadError(in_name, expected_end, max_pos)
    def _read_subset():
        return [ImcEntry.load(ins) for _x in range(subset_size)]
    default_subset = _read_subset()
    if type_identifier is ImcType.NON_SET:
        # This type stores the variant in place of the VFX ID for the
        # default record. The stored VFX short is discarded, so the default
        # record does not survive a decode/encode/decode cycle unless both
        # fields agree
        default_entry = default_subset[0]
        default_subset[0] = ImcEntry(default_entry.variant,
            default_entry.unknown, default_entry.mask, default_entry.variant)
    return FullImcInfo(type_identifier, default_subset,
                       [_read_subset() for _x in range(subset_count)])

def write_imc(imc_info: FullImcInfo) -> bytes:
    """Encodes the specified table into the contents of an IMC file. Every
    subset must be complete, partially initialized tables are rejected."""
    try:
        subset_size = _subset_sizes[imc_info.type_identifier]
    except KeyError:
        raise UnsupportedImcError('', imc_info.type_identifier)
    all_subsets = [imc_info.default_subset, *imc_info.subset_list]
    for subset_index, subset in enumerate(all_subsets):
        if len(subset) != subset_size:
            raise StateError(f'IMC subset {subset_index} has {len(subset)} '
                             f'entries, expected {subset_size}')
        if not all(isinstance(e, ImcEntry) for e in subset):
            raise StateError(f'IMC subset {subset_index} contains '
                             f'uninitialized entries')
    out = io.BytesIO()
    try:
        pack_short(out, imc_info.subset_count)
        pack_short(out, imc_info.type_identifier)
        for subset in all_subsets:
            for imc_entry in subset:
                out.write(imc_entry.get_bytes())
    except struct_error as e:
        raise StateError(f'IMC table holds a value that does not fit its '
                         f'field: {e}') from e
    return out.getvalue()
