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
"""Everything that has to be derived from a TTModel before it can be written
out as an MDL: bone set tables, attribute bitmasks, material indices and
shape overlays. The MDL stores these as indices into the model's sorted
bone/material/attribute lists, so the orderings in TTModel must not change
between two runs over the same model."""
from __future__ import annotations

__author__ = 'xivdata Team'

import io
from dataclasses import dataclass, field

from .ttmodel import TTMeshGroup, TTModel, TTVertex, prefix_offsets
from ..bolt import deprint, pack_int_signed, pack_short_signed
from ..exception import ArgumentError, CapacityExceededError

MAX_GROUP_BONES = 64
MAX_MODEL_ATTRIBUTES = 32

# Bone sets -------------------------------------------------------------------
def encode_bone_set(group_bones: list[str], model_bones: list[str]) -> bytes:
    """Builds the translation table of [mesh group bone index] => [model bone
    index]: 64 signed shorts (unused ones zeroed), followed by an int holding
    the number of bones the group actually uses. A bone missing from
    model_bones translates to -1. Every entry takes a slot, repeated names
    included."""
    if (num_bones := len(group_bones)) > MAX_GROUP_BONES:
        raise CapacityExceededError('Mesh group bones', num_bones,
                                    MAX_GROUP_BONES)
    model_indices = {b: i for i, b in enumerate(model_bones)}
    out = io.BytesIO()
    for bone_name in group_bones:
        pack_short_signed(out, model_indices.get(bone_name, -1))
    out.write(b'\x00' * (2 * (MAX_GROUP_BONES - num_bones)))
    pack_int_signed(out, num_bones)
    return out.getvalue()

def get_bone_set(model: TTModel, group_number: int) -> bytes:
    """Creates the bone set of the specified mesh group."""
    return encode_bone_set(model.mesh_groups[group_number].bones, model.bones)

# Attributes ------------------------------------------------------------------
def encode_attribute_bitmask(part_attributes: set[str],
                             model_attributes: list[str]) -> int:
    """Bit i of the result is set iff part_attributes contains the i-th
    entry of model_attributes."""
    if (num_attrs := len(model_attributes)) > MAX_MODEL_ATTRIBUTES:
        raise CapacityExceededError('Model attributes', num_attrs,
                                    MAX_MODEL_ATTRIBUTES)
    attr_mask = 0
    for i, attr in enumerate(model_attributes):
        if attr in part_attributes:
            attr_mask |= 1 << i
    return attr_mask

def get_attribute_bitmask(model: TTModel, group_number: int,
                          part_number: int) -> int:
    """Retrieves the attribute bitmask of the specified part."""
    part_attrs = model.mesh_groups[group_number].parts[part_number].attributes
    return encode_attribute_bitmask(part_attrs, model.attributes)

# Materials -------------------------------------------------------------------
def get_material_index(model: TTModel, group_number: int) -> int:
    """Gets the index of the specified group's material in the model's
    material list. Out of range groups and groups without a material get
    0."""
    if not 0 <= group_number < len(model.mesh_groups):
        return 0
    group_material = model.mesh_groups[group_number].material
    try:
        return model.materials.index(group_material)
    except ValueError:
        return 0

# Shapes ----------------------------------------------------------------------
def _check_shape_part(shape_part, base_vertex_count):
    for base_id, shape_vertex_id in shape_part.replacements.items():
        if not 0 <= base_id < base_vertex_count:
            raise ArgumentError(f'Shape part {shape_part.name} replaces '
                                f'vertex {base_id}, but its mesh group only '
                                f'has {base_vertex_count} vertices')
        if not 0 <= shape_vertex_id < len(shape_part.vertices):
            raise ArgumentError(f'Shape part {shape_part.name} uses vertex '
                                f'{shape_vertex_id}, but only has '
                                f'{len(shape_part.vertices)} vertices')

def get_shape_vertices(group: TTMeshGroup, shape_name: str) -> list[TTVertex]:
    """Returns the group level vertex list with the specified shape applied:
    every vertex replaced by one of the group's shape parts with that name is
    swapped for the shape's vertex, all others pass through unchanged."""
    shaped_vertices = list(group.iter_vertices())
    for shape_part in group.shape_parts:
        if shape_part.name != shape_name: continue
        _check_shape_part(shape_part, len(shaped_vertices))
        for base_id, shape_vertex_id in shape_part.replacements.items():
            shaped_vertices[base_id] = shape_part.vertices[shape_vertex_id]
    return shaped_vertices

def get_shape_vertex_offsets(group: TTMeshGroup) -> list[int]:
    """Where each shape part's vertices start once they are appended, in
    order, after the group's own vertices."""
    base_vertex_count = group.vertex_count
    return [base_vertex_count + o for o in prefix_offsets(
        len(s.vertices) for s in group.shape_parts)]

def get_shape_index_map(group: TTMeshGroup,
                        shape_name: str) -> dict[int, int]:
    """Returns [group level vertex ID] => [exported vertex ID] for the
    specified shape, with shape vertices addressed as laid out by
    get_shape_vertex_offsets."""
    base_vertex_count = group.vertex_count
    index_map = {}
    for shape_part, vertex_offset in zip(group.shape_parts,
                                         get_shape_vertex_offsets(group)):
        if shape_part.name != shape_name: continue
        _check_shape_part(shape_part, base_vertex_count)
        for base_id, shape_vertex_id in shape_part.replacements.items():
            index_map[base_id] = vertex_offset + shape_vertex_id
    return index_map

# Export ----------------------------------------------------------------------
@dataclass(slots=True)
class MeshExportData:
    """One mesh group, flattened into what the MDL needs."""
    # Group level vertices, followed by the vertices of every shape part
    vertices: list[TTVertex]
    # Tangents with the handedness flip applied, parallel to vertices
    tangents: list[tuple[float, float, float]]
    # Group level triangle indices, pointing into vertices
    indices: list[int]
    part_index_offsets: list[int]
    part_index_counts: list[int]
    part_attribute_masks: list[int]
    material_index: int
    bone_set: bytes
    shape_index_maps: dict[str, dict[int, int]] = field(default_factory=dict)

@dataclass(slots=True)
class MdlExportData:
    """A whole TTModel, flattened into what the MDL needs."""
    bones: list[str]
    materials: list[str]
    attributes: list[str]
    shape_names: list[str]
    shape_part_counts: list[int]
    meshes: list[MeshExportData] = field(default_factory=list)

def _flip_tangent(vertex):
    sign = vertex.tangent_sign
    return tuple(c * sign for c in vertex.tangent)

def prepare_export(model: TTModel) -> MdlExportData:
    """Derives everything the MDL writer needs from model. Raises
    CapacityExceededError if the model has too many attributes or a mesh
    group has too many bones."""
    model_bones = model.bones
    model_attributes = model.attributes
    export_data = MdlExportData(model_bones, model.materials,
        model_attributes, model.shape_names, model.shape_part_counts)
    try:
        if (num_attrs := len(model_attributes)) > MAX_MODEL_ATTRIBUTES:
            raise CapacityExceededError('Model attributes', num_attrs,
                                        MAX_MODEL_ATTRIBUTES)
        for group_number, group in enumerate(model.mesh_groups):
            vertices = list(group.iter_vertices())
            for shape_part in group.shape_parts:
                vertices.extend(shape_part.vertices)
            group_shape_names = sorted({s.name for s in group.shape_parts})
            export_data.meshes.append(MeshExportData(
                vertices=vertices,
                tangents=[_flip_tangent(v) for v in vertices],
                indices=list(group.iter_indices()),
                part_index_offsets=group.part_index_offsets,
                part_index_counts=[len(p.triangle_indices)
                                   for p in group.parts],
                part_attribute_masks=[encode_attribute_bitmask(
                    p.attributes, model_attributes) for p in group.parts],
                material_index=get_material_index(model, group_number),
                bone_set=encode_bone_set(group.bones, model_bones),
                shape_index_maps={n: get_shape_index_map(group, n)
                                  for n in group_shape_names}))
    except CapacityExceededError as e:
        deprint(f'Model can not be exported: {e}')
        raise
    return export_data
