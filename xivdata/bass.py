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
"""This module just stores some data that all modules have to be able to access
without worrying about circular imports. Settings are read from an optional
INI file, anything it does not set keeps the defaults below."""
import copy
import os
from configparser import ConfigParser, Error as ConfigError

from .bolt import deprint
from .exception import ArgumentError

inisettings_defaults = {
    'Imc': {
        # category and source tags recorded with every IMC write
        'category': 'Meta',
        'source': 'Internal',
    },
    'Archive': {
        # data partition IMC blocks are read from when none is specified
        'data_file': '040000',
    },
    'Strings': {
        # tried first when decoding byte names from a record source
        'encoding': 'utf8',
    },
}

#--Global dictionary - do _not_ reassign !
inisettings = copy.deepcopy(inisettings_defaults)

def reset_settings():
    """Restore every setting to its default value."""
    inisettings.clear()
    inisettings.update(copy.deepcopy(inisettings_defaults))

def load_settings(settings_path):
    """Overlay the settings found in the INI file at settings_path on top of
    the current ones. A missing file is not an error."""
    if not os.path.exists(settings_path):
        deprint(f'{settings_path} not found, keeping current settings')
        return
    # Keys are case sensitive, like the defaults above
    ini_parser = ConfigParser(interpolation=None)
    ini_parser.optionxform = str
    try:
        # always UTF-8, plain ASCII files included
        ini_parser.read(settings_path, encoding='utf-8')
    except ConfigError as e:
        raise ArgumentError(f'{settings_path} is not a valid INI file: '
                            f'{e}') from e
    for section in ini_parser.sections():
        if section not in inisettings_defaults:
            deprint(f'Ignoring unknown settings section {section!r}')
            continue
        for key, value in ini_parser.items(section):
            if key not in inisettings_defaults[section]:
                deprint(f'Ignoring unknown setting {section}.{key}')
                continue
            inisettings[section][key] = value
