"""
Interpreter settings.

A settings file holds one KEY = VALUE pair per line; blank lines and lines
starting with # are skipped. Single letters A-Z map drive names to
directories so that OPEN "B:DATA.TXT" finds its file.
"""

import logging
import os
import string

log = logging.getLogger(__name__)

DEFAULTS = {
    'WIDTH': 80,
    'ZONE': 14,
    'MAX_STACK': 255,
    'STORAGE': '.',
}

_INTEGER_KEYS = {'WIDTH', 'ZONE', 'MAX_STACK'}


def load_config(path=None):
    """Returns the defaults overlaid with the settings file, if it exists."""
    settings = dict(DEFAULTS)
    settings['DRIVES'] = {}
    if path is None or not os.path.exists(path):
        return settings
    with open(path, 'r') as f:
        for number, line in enumerate(f, 1):
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            if '=' not in line:
                log.warning("%s:%d: ignoring line without '='", path, number)
                continue
            key, val = line.split('=', 1)
            key = key.strip().upper()
            val = val.strip()
            if len(key) == 1 and key in string.ascii_uppercase:
                settings['DRIVES'][key] = val
            elif key in _INTEGER_KEYS:
                try:
                    settings[key] = int(val)
                except ValueError:
                    log.warning("%s:%d: %s needs an integer, got %r", path, number, key, val)
            elif key in DEFAULTS:
                settings[key] = val
            else:
                log.warning("%s:%d: unknown setting %s", path, number, key)
    return settings
