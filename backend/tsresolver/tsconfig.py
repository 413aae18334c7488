"""
TypeScript configuration file loading.

This module locates tsconfig files for the configured projects, reads them
permissively (comments and trailing commas are allowed, as tsc allows
them) and folds ``extends`` chains into a single effective configuration.
"""

import glob
import json
import logging
import os
from typing import Any, Dict, List, Optional, Sequence, Union

from .exceptions import CyclicExtendsError
from .models import ProjectConfig
from .path_utils import is_absolute, is_relative

logger = logging.getLogger(__name__)

TSCONFIG_FILENAME = 'tsconfig.json'
JSON_EXTENSIONS = ('.json', '.jsonc')
GLOB_CHARS = frozenset('*?[')
IGNORED_DIRECTORY = 'node_modules'


def is_glob(pattern: str) -> bool:
    return any(char in GLOB_CHARS for char in pattern)


def _glob_base(pattern: str) -> str:
    """Directory part of ``pattern`` before its first glob component."""
    literal = []
    for part in pattern.split(os.sep):
        if is_glob(part):
            break
        literal.append(part)
    return os.sep.join(literal) or os.sep


def locate_configs(cwd: str, project: Union[str, Sequence[str], None]) -> List[str]:
    """
    Expand the configured project specs into absolute config paths.

    Args:
        cwd: Directory that relative specs and globs are taken against
        project: One path or glob, a list of them, or None for ``cwd``

    Returns:
        Absolute paths in first-seen order, without duplicates
    """
    if project is None:
        patterns = [cwd]
    elif isinstance(project, str):
        patterns = [project]
    elif isinstance(project, (list, tuple)):
        patterns = list(project)
    else:
        patterns = [project]

    if not patterns:
        logger.debug("No tsconfig paths were configured")
        return []

    paths: Dict[str, None] = {}
    for pattern in patterns:
        if not isinstance(pattern, str):
            logger.debug(f"Skipping non-string project entry: {pattern!r}")
            continue
        if is_glob(pattern):
            full_pattern = pattern if os.path.isabs(pattern) else os.path.join(cwd, pattern)
            base = _glob_base(os.path.normpath(full_pattern))
            for match in sorted(glob.glob(full_pattern, recursive=True)):
                # only directories the glob itself walked into count
                parts = os.path.relpath(match, base).split(os.sep)
                if IGNORED_DIRECTORY in parts:
                    continue
                paths[os.path.abspath(match)] = None
        else:
            paths[os.path.abspath(os.path.join(cwd, pattern))] = None

    return list(paths)


def resolve_config_path(project_path: str) -> str:
    """Turn a project directory or extension-less name into a config file path."""
    if project_path.endswith(('/', '\\')) or os.path.isdir(project_path):
        return os.path.join(project_path, TSCONFIG_FILENAME)
    if not project_path.lower().endswith(JSON_EXTENSIONS):
        return project_path + '.json'
    return project_path


def strip_json_comments(text: str) -> str:
    """
    Remove comments and trailing commas from JSON text.

    String literals are left untouched, including any ``//`` inside them.

    Args:
        text: JSON text with possible comments

    Returns:
        Text that the standard json module accepts
    """
    result = []
    i = 0
    length = len(text)
    in_string = False
    pending_comma = None  # index in result of a comma that may be trailing

    while i < length:
        char = text[i]

        if in_string:
            result.append(char)
            if char == '\\' and i + 1 < length:
                result.append(text[i + 1])
                i += 2
                continue
            if char == '"':
                in_string = False
            i += 1
            continue

        # Check for // comment
        if char == '/' and text.startswith('//', i):
            while i < length and text[i] != '\n':
                i += 1
            continue

        # Check for /* */ comment
        if char == '/' and text.startswith('/*', i):
            end = text.find('*/', i + 2)
            i = length if end < 0 else end + 2
            continue

        if char in '}]' and pending_comma is not None:
            result[pending_comma] = ''
        if char == ',':
            pending_comma = len(result)
        elif not char.isspace():
            pending_comma = None

        if char == '"':
            in_string = True
        result.append(char)
        i += 1

    return ''.join(result)


def read_jsonc(config_path: str) -> Optional[Dict[str, Any]]:
    """Read a JSON-with-comments file, returning None if it can't be used."""
    try:
        with open(config_path, 'r', encoding='utf-8-sig') as f:
            content = f.read()
        data = json.loads(strip_json_comments(content))
    except (OSError, ValueError) as e:
        logger.debug(f"Could not read JSON from {config_path}: {e}")
        return None

    if not isinstance(data, dict):
        logger.debug(f"Ignoring {config_path}: top level is not an object")
        return None
    return data


def deep_merge(base: Any, patch: Any) -> Any:
    """Deep merge ``patch`` over ``base``.

    - Objects are merged recursively, keys from ``patch`` win.
    - Anything else in ``patch`` (arrays included) replaces the base value.
    """
    if not (isinstance(base, dict) and isinstance(patch, dict)):
        return patch

    result = dict(base)
    for key, value in patch.items():
        result[key] = deep_merge(base[key], value) if key in base else value
    return result


def _find_in_module_directories(specifier: str, start_dir: str) -> Optional[str]:
    """Look up a package-provided tsconfig (e.g. ``@tsconfig/node18``)."""
    current_dir = start_dir
    while True:
        candidate = os.path.join(current_dir, IGNORED_DIRECTORY, specifier)
        if os.path.isdir(candidate):
            candidate = os.path.join(candidate, TSCONFIG_FILENAME)
        elif not candidate.lower().endswith(JSON_EXTENSIONS):
            candidate += '.json'
        if os.path.isfile(candidate):
            return candidate

        parent = os.path.dirname(current_dir)
        if parent == current_dir:
            return None
        current_dir = parent


def resolve_extends_path(extends: str, root_path: str) -> Optional[str]:
    """Resolve one ``extends`` entry against the directory of the extending file."""
    if is_relative(extends) or is_absolute(extends):
        return os.path.normpath(resolve_config_path(os.path.join(root_path, extends)))
    return _find_in_module_directories(extends, root_path)


def _extends_list(raw: Dict[str, Any]) -> List[str]:
    extends = raw.get('extends')
    if isinstance(extends, str):
        return [extends]
    if isinstance(extends, list):
        return [entry for entry in extends if isinstance(entry, str)]
    return []


class _ExtendsFrame:
    """One config on the extends stack, with the parents still to load."""

    def __init__(self, config_path: str, raw: Dict[str, Any]):
        self.config_path = config_path
        self.raw = raw
        self.pending = iter(_extends_list(raw))
        self.base: Dict[str, Any] = {}


def _load_merged(config_path: str) -> Optional[Dict[str, Any]]:
    """Read ``config_path`` and merge in everything it extends.

    The chain is walked with an explicit stack. Paths on the stack are the
    files currently being loaded, outermost first, and a parent that is
    already on it is a cycle.
    """
    raw = read_jsonc(config_path)
    if raw is None:
        return None

    stack = [_ExtendsFrame(config_path, raw)]
    while True:
        frame = stack[-1]
        extends = next(frame.pending, None)
        if extends is not None:
            root_path = os.path.dirname(frame.config_path)
            parent_path = resolve_extends_path(extends, root_path)
            chain = [f.config_path for f in stack]
            if parent_path in chain:
                raise CyclicExtendsError(parent_path, chain)

            parent_raw = read_jsonc(parent_path) if parent_path else None
            if parent_raw is None:
                logger.debug(f"Could not load '{extends}' extended by {frame.config_path}")
            else:
                stack.append(_ExtendsFrame(parent_path, parent_raw))
            continue

        # every parent is merged; later entries override earlier ones
        merged = deep_merge(frame.base, frame.raw)
        stack.pop()
        if not stack:
            return merged
        stack[-1].base = deep_merge(stack[-1].base, merged)


def load_tsconfig(project_path: str) -> Optional[ProjectConfig]:
    """
    Load a tsconfig file with its ``extends`` chain merged in.

    Args:
        project_path: Config file, project directory or extension-less name

    Returns:
        ProjectConfig carrying the requested file's own path and directory,
        or None if the file is unreadable or its extends chain is circular
    """
    config_path = os.path.abspath(resolve_config_path(project_path))

    try:
        merged = _load_merged(config_path)
    except CyclicExtendsError as e:
        logger.error(e.message)
        return None

    if merged is None:
        logger.debug(f"Could not read tsconfig at {config_path}")
        return None

    return ProjectConfig.from_raw(merged, config_path, os.path.dirname(config_path))
