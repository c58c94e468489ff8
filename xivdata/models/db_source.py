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
"""Loading TTModels from the intermediate database written by external model
importers. The database holds four tables:

    parts(mesh, part, name)
    bones(mesh, bone_id, name)
    vertices(mesh, part, position_x/y/z, normal_x/y/z, color_r/g/b/a,
             uv_1_u/v, uv_2_u/v, bone_1..4_id, bone_1..4_weight)
    indices(mesh, part, vertex_id)

Colors and weights are stored as floats in [0, 1]. Any RecordSource that
yields rows with these column names can be loaded."""
from __future__ import annotations

__author__ = 'xivdata Team'

import os
import sqlite3

from .ttmodel import TTMeshGroup, TTMeshPart, TTModel, TTVertex
from .. import bass
from ..bolt import Progress, decoder, deprint
from ..exception import FileError, MalformedRecordStreamError

class RecordSource(object):
    """Abstract source of model rows. Rows are mappings from column name to
    value, missing (NULL) values are None."""

    def iter_parts(self):
        """Yields every parts row, ordered by mesh, then part."""
        raise NotImplementedError

    def iter_bones(self):
        """Yields every bones row, ordered by mesh, then bone_id."""
        raise NotImplementedError

    def iter_vertices(self, mesh: int, part: int):
        """Yields the vertices rows of the specified part, in vertex ID
        order."""
        raise NotImplementedError

    def iter_indices(self, mesh: int, part: int):
        """Yields the indices rows of the specified part, in triangle
        order."""
        raise NotImplementedError

class SqliteRecordSource(RecordSource):
    """Reads rows from an SQLite database file. Use as a context manager, the
    connection is closed on exit."""

    def __init__(self, db_path):
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_value, exc_traceback):
        self.close()

    def open(self):
        # sqlite3.connect would happily create a new, empty database
        if not os.path.isfile(self._db_path):
            raise FileError(self._db_path, 'Model database does not exist')
        self._conn = sqlite3.connect(self._db_path)
        self._conn.row_factory = sqlite3.Row

    def close(self):
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def _query(self, sql, params=()):
        if self._conn is None:
            raise FileError(self._db_path, 'Model database is not open')
        yield from self._conn.execute(sql, params)

    def iter_parts(self):
        return self._query('select mesh, part, name from parts '
                           'order by mesh asc, part asc')

    def iter_bones(self):
        return self._query('select mesh, bone_id, name from bones '
                           'order by mesh asc, bone_id asc')

    def iter_vertices(self, mesh, part):
        return self._query('select * from vertices where mesh = ? and '
                           'part = ? order by rowid', (mesh, part))

    def iter_indices(self, mesh, part):
        return self._query('select vertex_id from indices where mesh = ? '
                           'and part = ? order by rowid', (mesh, part))

# Loading ---------------------------------------------------------------------
def _decode_name(name_value):
    return decoder(name_value,
                   encoding=bass.inisettings['Strings']['encoding'])

def _get_float(row, column):
    return float(row[column] or 0.0)

def _to_byte_channel(unit_value):
    """Scales a [0, 1] float to a 0-255 channel, rounding to nearest."""
    return min(max(round(unit_value * 255), 0), 255)

def _load_vertex(row) -> TTVertex:
    return TTVertex(
        position=tuple(_get_float(row, f'position_{a}') for a in 'xyz'),
        normal=tuple(_get_float(row, f'normal_{a}') for a in 'xyz'),
        uv1=(_get_float(row, 'uv_1_u'), _get_float(row, 'uv_1_v')),
        uv2=(_get_float(row, 'uv_2_u'), _get_float(row, 'uv_2_v')),
        vertex_color=[_to_byte_channel(_get_float(row, f'color_{c}'))
                      for c in 'rgba'],
        bone_ids=[int(row[f'bone_{i}_id'] or 0) & 0xFF for i in range(1, 5)],
        weights=[_to_byte_channel(_get_float(row, f'bone_{i}_weight'))
                 for i in range(1, 5)])

def _check_order(table_name, prev_key, curr_key):
    if not all(isinstance(k, int) for k in curr_key):
        raise MalformedRecordStreamError(f'{table_name}: missing or '
                                         f'non-integer index in {curr_key}')
    if min(curr_key) < 0:
        raise MalformedRecordStreamError(f'{table_name}: negative index in '
                                         f'{curr_key}')
    if prev_key is not None and curr_key <= prev_key:
        raise MalformedRecordStreamError(
            f'{table_name}: {curr_key} follows {prev_key}, rows must be '
            f'unique and in ascending order')

def load_model(source: RecordSource, progress: Progress | None = None):
    """Builds a TTModel out of the rows in source. Groups and parts are
    created as the parts rows reference them, skipped indices get empty
    groups/parts.

    :param source: The RecordSource to read rows from.
    :param progress: An optional bolt.Progress, advanced once per part."""
    progress = progress or Progress()
    model = TTModel()
    prev_key = None
    for parts_row in source.iter_parts():
        mesh_num, part_num = curr_key = (parts_row['mesh'], parts_row['part'])
        _check_order('parts', prev_key, curr_key)
        prev_key = curr_key
        while len(model.mesh_groups) <= mesh_num:
            model.mesh_groups.append(TTMeshGroup())
        group_parts = model.mesh_groups[mesh_num].parts
        while len(group_parts) <= part_num:
            group_parts.append(TTMeshPart())
        group_parts[part_num].name = _decode_name(parts_row['name'])
    prev_key = None
    for bones_row in source.iter_bones():
        mesh_num, _bone_id = curr_key = (bones_row['mesh'],
                                         bones_row['bone_id'])
        _check_order('bones', prev_key, curr_key)
        prev_key = curr_key
        if mesh_num >= len(model.mesh_groups):
            raise MalformedRecordStreamError(
                f'bones: mesh {mesh_num} has no parts (only '
                f'{len(model.mesh_groups)} mesh groups exist)')
        model.mesh_groups[mesh_num].bones.append(
            _decode_name(bones_row['name']))
    progress.setFull(max(sum(len(m.parts) for m in model.mesh_groups), 1))
    parts_done = 0
    for mesh_id, mesh_group in enumerate(model.mesh_groups):
        for part_id, mesh_part in enumerate(mesh_group.parts):
            progress(parts_done, f'Mesh {mesh_id}, part {part_id}')
            mesh_part.vertices = [_load_vertex(r) for r in
                                  source.iter_vertices(mesh_id, part_id)]
            num_vertices = len(mesh_part.vertices)
            triangle_indices = []
            for indices_row in source.iter_indices(mesh_id, part_id):
                vertex_id = indices_row['vertex_id']
                if not (isinstance(vertex_id, int) and
                        0 <= vertex_id < num_vertices):
                    raise MalformedRecordStreamError(
                        f'indices: mesh {mesh_id}, part {part_id} references '
                        f'vertex {vertex_id}, but the part only has '
                        f'{num_vertices} vertices')
                triangle_indices.append(vertex_id)
            mesh_part.triangle_indices = triangle_indices
            parts_done += 1
    progress(progress.full)
    deprint(f'Loaded model with {len(model.mesh_groups)} mesh groups, '
            f'{parts_done} parts and {model.vertex_count} vertices')
    return model

def load_model_from_db(db_path, progress: Progress | None = None):
    """Loads a TTModel from the SQLite database at db_path."""
    with SqliteRecordSource(db_path) as source:
        return load_model(source, progress)
