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
"""The editable model representation. A model is made of mesh groups, each
of which is made of parts. The game only knows about mesh groups - at export
all parts of a group get stacked together into one vertex list and one index
list, which is what the offset and addressing helpers below compute.

Nothing derived (bone lists, material lists, offsets...) is stored, it is
recomputed from the groups and parts whenever it is asked for."""
from __future__ import annotations

__author__ = 'xivdata Team'

from bisect import bisect_right
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

Vector2 = tuple[float, float]
Vector3 = tuple[float, float, float]

@dataclass(slots=True)
class TTVertex:
    """A fully qualified vertex. All of these values are keyed to the same
    index in the game's buffers, so none of them can be changed for just one
    of the triangles sharing the vertex."""
    position: Vector3 = (0.0, 0.0, 0.0)
    normal: Vector3 = (0.0, 0.0, 0.0)
    binormal: Vector3 = (0.0, 0.0, 0.0)
    tangent: Vector3 = (0.0, 0.0, 0.0)
    # Technically binormal handedness. True means the tangent gets flipped
    # when it is generated at export
    handedness: bool = False
    uv1: Vector2 = (0.0, 0.0)
    uv2: Vector2 = (0.0, 0.0)
    # RGBA, 0-255 each
    vertex_color: list[int] = field(default_factory=lambda: [255] * 4)
    # A vertex can be influenced by at most 4 bones. The IDs index the bone
    # list of the vertex' mesh group, weights are 0-255 for 0.0-1.0
    bone_ids: list[int] = field(default_factory=lambda: [0] * 4)
    weights: list[int] = field(default_factory=lambda: [0] * 4)

    @property
    def tangent_sign(self) -> int:
        return -1 if self.handedness else 1

@dataclass(slots=True)
class TTMeshPart:
    """A part of a mesh group. Vertex IDs in triangle_indices are local to
    this part."""
    # Purely semantic, not guaranteed to be unique
    name: str | None = None
    vertices: list[TTVertex] = field(default_factory=list)
    triangle_indices: list[int] = field(default_factory=list)
    attributes: set[str] = field(default_factory=set)

@dataclass(slots=True)
class TTShapePart:
    """Shape data for a mesh group. A group may have any number of these,
    including several with the same shape name."""
    # The raw shp_ identifier
    name: str
    # The vertices this shape introduces
    vertices: list[TTVertex] = field(default_factory=list)
    # mesh group level vertex ID -> index in vertices to replace it with
    replacements: dict[int, int] = field(default_factory=dict)

# Flattening ------------------------------------------------------------------
def prefix_offsets(sizes: Iterable[int]) -> list[int]:
    """Returns the offset at which each size starts when all of them are
    stacked together, e.g. [2, 3, 4] -> [0, 2, 5]."""
    offsets = []
    running_total = 0
    for block_size in sizes:
        offsets.append(running_total)
        running_total += block_size
    return offsets

def locate(offsets: Sequence[int], total: int,
           global_id: int) -> tuple[int, int]:
    """Returns the (block index, local ID) that global_id falls in. Each
    block owns the half-open range [offset, next offset), so empty blocks
    never own anything. IDs outside [0, total) raise IndexError."""
    if not 0 <= global_id < total:
        raise IndexError(f'ID {global_id} is out of range for {total} '
                         f'entries')
    block_index = bisect_right(offsets, global_id) - 1
    return block_index, global_id - offsets[block_index]

@dataclass(slots=True)
class TTMeshGroup:
    """A mesh group. At the game level all of its parts get crushed down into
    one single mesh, in the order they appear in parts."""
    parts: list[TTMeshPart] = field(default_factory=list)
    # Material used by this mesh group, None until one is assigned
    material: str | None = None
    # Bones used by this mesh group's vertices, TTVertex.bone_ids index this
    bones: list[str] = field(default_factory=list)
    shape_parts: list[TTShapePart] = field(default_factory=list)

    @property
    def part_vertex_offsets(self) -> list[int]:
        """Where each part's vertices start in the group's vertex list."""
        return prefix_offsets(len(p.vertices) for p in self.parts)

    @property
    def part_index_offsets(self) -> list[int]:
        """Where each part's triangle indices start in the group's index
        list."""
        return prefix_offsets(len(p.triangle_indices) for p in self.parts)

    @property
    def vertex_count(self) -> int:
        return sum(len(p.vertices) for p in self.parts)

    @property
    def index_count(self) -> int:
        return sum(len(p.triangle_indices) for p in self.parts)

    def locate_vertex(self, vertex_id: int) -> tuple[int, int]:
        """Returns the (part index, local vertex ID) of a group level vertex
        ID."""
        return locate(self.part_vertex_offsets, self.vertex_count, vertex_id)

    def locate_index(self, index_id: int) -> tuple[int, int]:
        """Returns the (part index, local index position) of a group level
        index position."""
        return locate(self.part_index_offsets, self.index_count, index_id)

    def get_vertex_at(self, vertex_id: int) -> TTVertex:
        """Accessor for the unified, group level vertex list."""
        part_index, local_id = self.locate_vertex(vertex_id)
        return self.parts[part_index].vertices[local_id]

    def get_index_at(self, index_id: int) -> int:
        """Accessor for the unified, group level index list. The result is
        translated to point into the group level vertex list."""
        part_index, local_id = self.locate_index(index_id)
        local_vertex_id = self.parts[part_index].triangle_indices[local_id]
        return local_vertex_id + self.part_vertex_offsets[part_index]

    def iter_vertices(self):
        """Yields the unified, group level vertex list."""
        for p in self.parts:
            yield from p.vertices

    def iter_indices(self):
        """Yields the unified, group level index list, already translated to
        group level vertex IDs."""
        for p, vertex_offset in zip(self.parts, self.part_vertex_offsets):
            for local_vertex_id in p.triangle_indices:
                yield local_vertex_id + vertex_offset

@dataclass(slots=True)
class TTModel:
    """A 3D model, independent of the item or anything else that uses it.
    Primarily meant for I/O with importers/exporters, so it holds no padding
    or unknown data that the user could not do anything with."""
    mesh_groups: list[TTMeshGroup] = field(default_factory=list)

    # Derived views - sorted ordinally, indices into these are what end up
    # being written to the game files
    @property
    def bones(self) -> list[str]:
        """Every bone used by this model."""
        return sorted({b for m in self.mesh_groups for b in m.bones})

    @property
    def materials(self) -> list[str]:
        """Every material used by this model."""
        return sorted({m.material for m in self.mesh_groups
                       if m.material is not None})

    @property
    def attributes(self) -> list[str]:
        """Every attribute used by this model."""
        return sorted({a for m in self.mesh_groups for p in m.parts
                       for a in p.attributes})

    @property
    def shape_names(self) -> list[str]:
        """Every shape name used by this model."""
        return sorted({p.name for m in self.mesh_groups
                       for p in m.shape_parts})

    @property
    def has_shape_data(self) -> bool:
        return any(m.shape_parts for m in self.mesh_groups)

    @property
    def shape_part_count(self) -> int:
        return sum(len(m.shape_parts) for m in self.mesh_groups)

    @property
    def shape_data_count(self) -> int:
        """Total number of replacement entries over all shape parts."""
        return sum(len(p.replacements) for m in self.mesh_groups
                   for p in m.shape_parts)

    @property
    def shape_part_counts(self) -> list[int]:
        """Number of shape parts carrying each name, parallel to
        shape_names."""
        name_counts = {}
        for m in self.mesh_groups:
            for p in m.shape_parts:
                name_counts[p.name] = name_counts.get(p.name, 0) + 1
        return [name_counts[n] for n in self.shape_names]

    @property
    def shape_parts(self) -> list[tuple[TTShapePart, int]]:
        """Every shape part with the index of its mesh group, grouped by
        shape name in shape_names order (matches shape_part_counts). Inside
        one name, parts keep their mesh group order."""
        by_shape: dict[str, list[tuple[TTShapePart, int]]] = {}
        for mesh_id, m in enumerate(self.mesh_groups):
            for p in m.shape_parts:
                by_shape.setdefault(p.name, []).append((p, mesh_id))
        return [s for n in self.shape_names for s in by_shape[n]]

    @property
    def has_weights(self) -> bool:
        """Whether or not this model actually has weight data."""
        return any(m.bones for m in self.mesh_groups)

    @property
    def vertex_count(self) -> int:
        return sum(m.vertex_count for m in self.mesh_groups)

    @property
    def index_count(self) -> int:
        return sum(m.index_count for m in self.mesh_groups)

    def dump_to_log(self, log):
        """Writes a summary of this model to the specified bolt.Log."""
        log.setHeader(f'Model ({len(self.mesh_groups)} mesh groups, '
                      f'{self.vertex_count} vertices, {self.index_count} '
                      f'indices)')
        for mesh_id, m in enumerate(self.mesh_groups):
            log(f'  Mesh group {mesh_id}: material={m.material}, '
                f'{len(m.bones)} bones, {len(m.shape_parts)} shape parts')
            for part_id, p in enumerate(m.parts):
                log(f'    Part {part_id} ({p.name}): {len(p.vertices)} '
                    f'vertices, {len(p.triangle_indices)} indices, '
                    f'attributes: {", ".join(sorted(p.attributes))}')
        if shape_names := self.shape_names:
            log(f'  Shapes: {", ".join(shape_names)}')
