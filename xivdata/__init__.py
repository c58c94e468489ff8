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
"""xivdata: decoding and encoding of game asset formats for modding - item
variant configuration (IMC) files and the mesh composition needed to turn an
editable model into the game's model layout."""
