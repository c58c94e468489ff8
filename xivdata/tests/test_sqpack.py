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
import pytest

from . import imc_bytes
from .. import bass
from ..exception import ArchiveError, ArchiveNotFoundError, \
    UnsupportedImcError
from ..imc import ImcEntry, read_imc
from ..sqpack import ArchiveStore, ImcFiles, ItemModelInfo, ItemType, \
    MemoryArchiveStore, get_imc_path

_top_path = 'chara/equipment/e0005/e0005.imc'
_weapon_path = 'chara/weapon/w0201/obj/body/b0001/b0001.imc'
_set_data = imc_bytes(1, 31, [(1, 0, 0x3FF, 0)] * 5 +
                      [(2, 0, 0x3FF, s) for s in range(5)])
_non_set_data = imc_bytes(1, 1, [(1, 0, 0x3FF, 1), (4, 0, 0x1FF, 9)])

@pytest.fixture
def store():
    return MemoryArchiveStore({_top_path: _set_data,
                               _weapon_path: _non_set_data})

@pytest.fixture(autouse=True)
def _restore_settings():
    yield
    bass.reset_settings()

def _top_item(**kwargs):
    return ItemModelInfo('chara/equipment/e0005', ItemType.EQUIPMENT, 5,
                         imc_subset_id=1, slot='top', **kwargs)

def _weapon_item(secondary_id, **kwargs):
    return ItemModelInfo(f'chara/weapon/w0201/obj/body/b{secondary_id:04d}',
                         ItemType.WEAPON, 201, secondary_id, **kwargs)

class TestGetImcPath(object):
    @pytest.mark.parametrize('item_type, expected_file', [
        (ItemType.EQUIPMENT, 'e0012.imc'),
        (ItemType.ACCESSORY, 'a0012.imc'),
        (ItemType.WEAPON, 'b0034.imc'),
        (ItemType.MONSTER, 'b0034.imc'),
        (ItemType.DEMIHUMAN, 'e0034.imc'),
    ])
    def test_imc_file_names(self, item_type, expected_file):
        item = ItemModelInfo('some/folder', item_type, 12, 34)
        assert get_imc_path(item) == ('some/folder', expected_file)

    @pytest.mark.parametrize('item_type', [ItemType.HUMAN, ItemType.UNKNOWN])
    def test_no_imc(self, item_type):
        assert get_imc_path(ItemModelInfo('f', item_type, 1, 1)) == ('', '')

class TestMemoryArchiveStore(object):
    def test_offsets(self, store):
        top_offset = store.get_data_offset(_top_path)
        assert top_offset and top_offset != store.get_data_offset(
            _weapon_path)
        assert store.get_data_offset('missing/file.imc') == 0
        assert store.read_type2_data(top_offset, '040000') == _set_data

    def test_bad_offset(self, store):
        with pytest.raises(ArchiveError):
            store.read_type2_data(0x12345, '040000')

    def test_abstract_store(self):
        with pytest.raises(NotImplementedError):
            ArchiveStore().get_data_offset(_top_path)

class TestImcFiles(object):
    def test_get_full_imc_info(self, store):
        imc_info = ImcFiles(store).get_full_imc_info(_top_path)
        assert imc_info == read_imc(_set_data)

    def test_not_found(self, store, capsys):
        imc_files = ImcFiles(store)
        with pytest.raises(ArchiveNotFoundError) as exc_info:
            imc_files.get_full_imc_info('chara/equipment/e9999/e9999.imc')
        assert 'e9999.imc' in str(exc_info.value)
        assert 'Could not find offset' in capsys.readouterr().out

    def test_no_new_files(self, store):
        imc_info = read_imc(_set_data)
        with pytest.raises(ArchiveNotFoundError):
            ImcFiles(store).save_full_imc_info(imc_info, 'new/file.imc')
        assert store.get_data_offset('new/file.imc') == 0

    def test_save_full_imc_info(self, store):
        imc_files = ImcFiles(store)
        imc_info = imc_files.get_full_imc_info(_top_path)
        imc_info.subset_list.append(list(imc_info.default_subset))
        imc_files.save_full_imc_info(imc_info, _top_path)
        assert imc_files.get_full_imc_info(_top_path).subset_count == 2
        assert store.import_log[_top_path] == ('e0005.imc', 'Meta',
                                               'Internal')
        imc_files.save_full_imc_info(imc_info, _top_path, 'Shirt', 'Gear',
                                     'Tester')
        assert store.import_log[_top_path] == ('Shirt', 'Gear', 'Tester')

    def test_save_uses_settings(self, store):
        bass.inisettings['Imc']['source'] = 'Configured'
        imc_files = ImcFiles(store)
        imc_files.save_full_imc_info(
            imc_files.get_full_imc_info(_top_path), _top_path)
        assert store.import_log[_top_path][2] == 'Configured'

    def test_data_file(self):
        class _RecordingStore(MemoryArchiveStore):
            def read_type2_data(self, offset, data_file):
                self.last_data_file = data_file
                return super().read_type2_data(offset, data_file)
        rec_store = _RecordingStore({_top_path: _set_data})
        ImcFiles(rec_store).get_full_imc_info(_top_path)
        assert rec_store.last_data_file == '040000'
        ImcFiles(rec_store, '020000').get_full_imc_info(_top_path)
        assert rec_store.last_data_file == '020000'

    def test_save_imc_entry(self, store):
        imc_files = ImcFiles(store)
        new_entry = ImcEntry(7, 0, 0x3FF, 3)
        imc_files.save_imc_entry(new_entry, _top_path, 1, 'glv')
        assert imc_files.get_full_imc_info(_top_path).subset_list[0][2] == \
               new_entry

class TestItemImc(object):
    def test_get_item_imc_info(self, store):
        imc_files = ImcFiles(store)
        assert imc_files.get_item_imc_info(_top_item()) == ImcEntry(
            2, 0, 0x3FF, 1)

    def test_paired_item_fallback(self, store, capsys):
        imc_files = ImcFiles(store)
        offhand = _weapon_item(2, imc_subset_id=1,
                               paired_item=_weapon_item(1))
        assert imc_files.get_item_imc_info(offhand) == ImcEntry(4, 0, 0x1FF,
                                                                9)
        assert 'falling back to the paired item' in capsys.readouterr().out

    def test_no_paired_item(self, store):
        with pytest.raises(ArchiveNotFoundError):
            ImcFiles(store).get_item_imc_info(_weapon_item(2))

    def test_paired_item_missing_too(self, store):
        offhand = _weapon_item(2, paired_item=_weapon_item(3))
        with pytest.raises(ArchiveNotFoundError):
            ImcFiles(store).get_full_item_imc_info(offhand)

    def test_fallback_on_bad_format(self, store):
        store.add_file('chara/weapon/w0201/obj/body/b0002/b0002.imc',
                       imc_bytes(0, 7, []))
        offhand = _weapon_item(2, paired_item=_weapon_item(1))
        assert ImcFiles(store).get_full_item_imc_info(offhand) == read_imc(
            _non_set_data)
        with pytest.raises(UnsupportedImcError):
            ImcFiles(store).get_full_item_imc_info(_weapon_item(2))

    def test_save_item_imc_info(self, store):
        imc_files = ImcFiles(store)
        item = _top_item()
        new_entry = ImcEntry(3, 0, 0x2FF, 0)
        imc_files.save_item_imc_info(new_entry, item)
        assert imc_files.get_item_imc_info(item) == new_entry

    def test_save_paired_item(self, store):
        imc_files = ImcFiles(store)
        offhand = _weapon_item(2, imc_subset_id=1,
                               paired_item=_weapon_item(1))
        new_entry = ImcEntry(8, 0, 0x3FF, 8)
        imc_files.save_item_imc_info(new_entry, offhand)
        assert imc_files.get_full_imc_info(
            _weapon_path).subset_list[0][0] == new_entry
        assert _weapon_path in store.import_log
