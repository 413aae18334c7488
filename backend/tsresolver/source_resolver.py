"""
Node.js-style file resolution for a single specifier.

Handles:
- Relative and absolute paths with extension probing
- Extension aliases (``./foo.js`` finding ``./foo.ts``)
- Directory packages via package.json main fields and index files
- node_modules lookup walking up from the importing directory
- package.json ``exports`` with condition names and subpath patterns
"""

import json
import logging
import os
from typing import Any, Callable, Dict, List, Optional, Protocol

from .patterns import match_pattern, parse_pattern, substitute_pattern
from .path_utils import is_absolute, is_relative

logger = logging.getLogger(__name__)

PackageFilter = Callable[[Dict[str, Any]], Dict[str, Any]]


class SourceResolver(Protocol):
    """Turns one concrete specifier into an absolute file path."""

    def resolve(self, specifier: str, directory: str, file: str) -> Optional[str]:
        ...


def split_package_specifier(specifier: str):
    """Split ``@scope/pkg/sub/path`` into ``('@scope/pkg', './sub/path')``."""
    parts = specifier.split('/')
    count = 2 if specifier.startswith('@') else 1
    if len(parts) < count or not all(parts[:count]):
        return None, None
    name = '/'.join(parts[:count])
    rest = parts[count:]
    return name, './' + '/'.join(rest) if rest else '.'


class NodeSourceResolver:
    """Resolves specifiers to files the way Node.js and bundlers do."""

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        """
        Initialize the resolver.

        Args:
            options: Resolver options (see ``defaults.DEFAULT_RESOLVER_OPTIONS``)
        """
        options = options or {}
        self.extensions: List[str] = list(options.get('extensions') or [])
        self.extension_alias: Dict[str, List[str]] = dict(options.get('extension_alias') or {})
        self.main_fields: List[str] = list(options.get('main_fields') or ['main'])
        self.condition_names: List[str] = list(options.get('condition_names') or ['default'])
        self.package_filter: Optional[PackageFilter] = options.get('package_filter')
        self.module_directories: List[str] = list(options.get('module_directories') or ['node_modules'])
        self.package_json_cache: Dict[str, Optional[Dict[str, Any]]] = {}  # directory -> package.json

    def resolve(self, specifier: str, directory: str, file: str) -> Optional[str]:
        """
        Resolve ``specifier`` imported from ``file``.

        Args:
            specifier: Module specifier (relative, absolute or bare)
            directory: Directory relative specifiers are taken against
            file: The importing file

        Returns:
            Absolute path to the resolved file, or None if not found
        """
        try:
            if is_relative(specifier) or is_absolute(specifier):
                target = os.path.normpath(os.path.join(directory, specifier))
                resolved = self._load_as_file(target) or self._load_as_directory(target)
            else:
                resolved = self._resolve_package(specifier, directory)
        except (OSError, ValueError, TypeError) as e:
            logger.debug(f"Error resolving {specifier} from {file}: {e}")
            return None

        if resolved is None:
            return None
        return os.path.abspath(resolved)

    def _load_as_file(self, path: str) -> Optional[str]:
        """Try ``path`` itself, its extension aliases and appended extensions."""
        stem, ext = os.path.splitext(path)
        aliases = self.extension_alias.get(ext)
        if aliases:
            for alias in aliases:
                candidate = stem + alias
                if os.path.isfile(candidate):
                    return candidate
        elif os.path.isfile(path):
            return path

        for ext in self.extensions:
            candidate = path + ext
            if os.path.isfile(candidate):
                return candidate
        return None

    def _load_index(self, path: str) -> Optional[str]:
        for ext in self.extensions:
            candidate = os.path.join(path, 'index' + ext)
            if os.path.isfile(candidate):
                return candidate
        return None

    def _load_as_directory(self, path: str) -> Optional[str]:
        """Resolve a directory through package.json main fields or an index file."""
        if not os.path.isdir(path):
            return None

        pkg = self._read_package_json(path)
        if pkg is not None:
            for field_name in self.main_fields:
                entry = pkg.get(field_name)
                if not isinstance(entry, str) or not entry:
                    continue
                target = os.path.normpath(os.path.join(path, entry))
                resolved = self._load_as_file(target) or self._load_index(target)
                if resolved:
                    return resolved

        return self._load_index(path)

    def _resolve_package(self, specifier: str, directory: str) -> Optional[str]:
        """Resolve a bare specifier from the module directories above ``directory``."""
        name, subpath = split_package_specifier(specifier)
        if name is None:
            return None

        current_dir = directory
        while True:
            for module_directory in self.module_directories:
                package_dir = os.path.join(current_dir, module_directory, name)
                if not os.path.isdir(package_dir):
                    continue

                pkg = self._read_package_json(package_dir)
                if pkg is not None and pkg.get('exports') is not None:
                    # An exports map is authoritative for everything it covers
                    return self._resolve_exports(package_dir, pkg['exports'], subpath)

                target = os.path.join(current_dir, module_directory, specifier)
                resolved = self._load_as_file(target) or self._load_as_directory(target)
                if resolved:
                    return resolved

            # Move up one directory
            parent = os.path.dirname(current_dir)
            if parent == current_dir:
                return None
            current_dir = parent

    def _resolve_exports(self, package_dir: str, exports: Any, subpath: str) -> Optional[str]:
        if isinstance(exports, dict) and not any(key.startswith('.') for key in exports):
            exports = {'.': exports}
        elif not isinstance(exports, dict):
            exports = {'.': exports}

        if subpath in exports:
            return self._resolve_export_target(package_dir, exports[subpath], '')

        # Subpath patterns: the longest matching prefix wins
        best = None
        for key in exports:
            pattern = parse_pattern(key)
            if not pattern.is_wildcard:
                continue
            match = match_pattern(pattern, subpath)
            if match.is_match and (best is None or len(pattern.prefix) > len(best[0].prefix)):
                best = (pattern, match.capture, key)

        if best is None:
            logger.debug(f"{subpath} is not exported by {package_dir}")
            return None
        return self._resolve_export_target(package_dir, exports[best[2]], best[1])

    def _resolve_export_target(self, package_dir: str, target: Any, capture: str) -> Optional[str]:
        if isinstance(target, str):
            path = substitute_pattern(parse_pattern(target), capture) if '*' in target else target
            candidate = os.path.normpath(os.path.join(package_dir, path))
            return candidate if os.path.isfile(candidate) else None

        if isinstance(target, list):
            for item in target:
                resolved = self._resolve_export_target(package_dir, item, capture)
                if resolved:
                    return resolved
            return None

        if isinstance(target, dict):
            for condition, value in target.items():
                if condition == 'default' or condition in self.condition_names:
                    resolved = self._resolve_export_target(package_dir, value, capture)
                    if resolved:
                        return resolved
        return None

    def _read_package_json(self, directory: str) -> Optional[Dict[str, Any]]:
        """Read and filter ``directory/package.json``, memoized per directory."""
        if directory in self.package_json_cache:
            return self.package_json_cache[directory]

        pkg = None
        package_json = os.path.join(directory, 'package.json')
        if os.path.isfile(package_json):
            try:
                with open(package_json, 'r', encoding='utf-8') as f:
                    pkg = json.load(f)
            except (OSError, ValueError) as e:
                logger.warning(f"Failed to read {package_json}: {e}")

        if not isinstance(pkg, dict):
            pkg = None
        elif self.package_filter is not None:
            try:
                filtered = self.package_filter(dict(pkg))
            except Exception as e:
                logger.warning(f"package_filter failed for {package_json}, using it unfiltered: {e}")
            else:
                if isinstance(filtered, dict):
                    pkg = filtered
                else:
                    logger.warning(f"package_filter returned {type(filtered).__name__} "
                                   f"for {package_json}, using it unfiltered")

        self.package_json_cache[directory] = pkg
        return pkg

