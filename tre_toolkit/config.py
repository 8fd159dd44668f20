"""Archive search list loader.

The game client lists its archives in an INI style config (swg_live.cfg):

    [SharedFile]
    maxSearchPriority=3
    searchTree_00_0=data_other_00.tre
    searchTree_00_1=data_texture_00.tre
    searchTree_00_2=patch_00.tre
    searchTree_01_2=patch_sku1_00.tre

A higher number means a higher priority, and at the same number the sku1
(01) tree outranks the base (00) tree.
"""

import configparser
import logging
from pathlib import Path
from typing import Dict, List, Union

from .errors import ConfigError

logger = logging.getLogger(__name__)

SECTION = "SharedFile"
SEARCH_TREES = ("searchTree_00_{}", "searchTree_01_{}")


def _strip_directives(text: str) -> str:
    # '.include "file.cfg"' and similar lines are not INI syntax
    return "\n".join(line for line in text.splitlines() if not line.lstrip().startswith("."))


def _section_values(text: str, section: str) -> Dict[str, List[str]]:
    """Collect every value of every key in section, in file order.

    ConfigParser keeps only the last value of a repeated key, but the client
    lets one searchTree key name several archives.
    """
    values: Dict[str, List[str]] = {}
    current = None

    for line in text.splitlines():
        line = line.strip()
        if not line or line[0] in "#;":
            continue
        if line.startswith("[") and line.endswith("]"):
            current = line[1:-1].strip()
            continue
        if current != section or "=" not in line:
            continue
        key, value = line.split("=", 1)
        values.setdefault(key.strip().lower(), []).append(value.strip().strip('"'))

    return values


def load_search_paths(cfg_path: Union[str, Path]) -> List[Path]:
    """Return the archive paths of a live config, highest priority first.

    Relative archive paths are resolved against the config's directory. A key
    given more than once lists several archives; the later ones win, as they
    would when the client loads them in file order.
    """
    cfg_path = Path(cfg_path)
    text = _strip_directives(cfg_path.read_text(errors="replace"))
    parser = configparser.ConfigParser(strict=False, interpolation=None)

    try:
        parser.read_string(text, str(cfg_path))
    except configparser.Error as e:
        raise ConfigError(f"{cfg_path}: {e}") from e

    if not parser.has_section(SECTION):
        raise ConfigError(f"{cfg_path}: missing [{SECTION}] section")
    section = parser[SECTION]

    try:
        max_priority = int(section.get("maxSearchPriority", "0"))
    except ValueError as e:
        raise ConfigError(f"{cfg_path}: maxSearchPriority is not an integer") from e

    trees = _section_values(text, SECTION)

    # Lowest priority first, then reversed
    paths = []
    for priority in range(max_priority):
        for key in SEARCH_TREES:
            for value in trees.get(key.format(priority).lower(), []):
                if value:
                    paths.append(cfg_path.parent / value)

    paths.reverse()
    logger.debug("%s lists %d archives", cfg_path, len(paths))
    return paths
