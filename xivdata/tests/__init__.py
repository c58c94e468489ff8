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
"""Shared helpers for the xivdata tests."""
import struct

from ..models.ttmodel import TTMeshGroup, TTMeshPart, TTVertex

def imc_bytes(subset_count, type_tag, records):
    """Builds a raw IMC buffer out of a header and (variant, unknown, mask,
    vfx) tuples."""
    return struct.pack('<2H', subset_count, type_tag) + b''.join(
        struct.pack('<2B2H', *r) for r in records)

def vert(x):
    """A vertex told apart from others by its x position."""
    return TTVertex(position=(float(x), 0.0, 0.0))

def make_group(vertex_counts, index_lists=None, **kwargs):
    """Builds a mesh group with one part per entry of vertex_counts. Vertex
    positions count up across the whole group."""
    parts = []
    next_x = 0
    for part_num, num_verts in enumerate(vertex_counts):
        part_verts = [vert(next_x + i) for i in range(num_verts)]
        next_x += num_verts
        part_indices = list(index_lists[part_num]) if index_lists else []
        parts.append(TTMeshPart(f'part{part_num}', part_verts, part_indices))
    return TTMeshGroup(parts, **kwargs)
