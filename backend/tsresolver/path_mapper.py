"""
Compiled ``compilerOptions.paths`` alias tables.

Each located tsconfig becomes a PathMapper that rewrites a specifier into
the ordered list of absolute candidates its first matching alias points to.
"""

import logging
import os
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .models import PathMatcher, ProjectConfig
from .patterns import match_pattern, parse_pattern, substitute_pattern
from .tsconfig import load_tsconfig, locate_configs

logger = logging.getLogger(__name__)


class PathMapper:
    """Alias table of one project, applied in declaration order."""

    def __init__(self, root_path: str, base_path: str, matchers: Sequence[PathMatcher],
                 config_path: Optional[str] = None):
        """
        Args:
            root_path: Directory of the tsconfig file; decides which source
                files this mapper applies to
            base_path: Absolute baseUrl that replacements are resolved against
            matchers: Compiled alias entries in declaration order
            config_path: The tsconfig file the mapper was built from
        """
        self.root_path = root_path
        self.base_path = base_path
        self.matchers: Tuple[PathMatcher, ...] = tuple(matchers)
        self.config_path = config_path

    def map(self, specifier: str) -> Optional[List[str]]:
        """
        Rewrite ``specifier`` through the first matching alias.

        Returns:
            Absolute candidate paths in replacement order, or None when no
            alias matches
        """
        for matcher in self.matchers:
            match = match_pattern(matcher.matching, specifier)
            if match.is_match:
                return [
                    os.path.normpath(os.path.join(self.base_path, substitute_pattern(pattern, match.capture)))
                    for pattern in matcher.replacing
                ]
        return None

    def __repr__(self) -> str:
        return f"PathMapper(root_path={self.root_path!r}, matchers={len(self.matchers)})"


def compile_matchers(paths: Dict[str, Any]) -> List[PathMatcher]:
    """Compile a ``paths`` table, keeping the source order of its keys."""
    matchers = []
    for match_pattern_str, replacements in paths.items():
        if isinstance(replacements, str):
            replacements = [replacements]
        if not isinstance(replacements, list):
            logger.debug(f"Ignoring paths entry {match_pattern_str!r}: replacements are not a list")
            continue

        matching = parse_pattern(match_pattern_str)
        # A wildcard replacement has nothing to fill in without a wildcard match
        replacing = tuple(
            pattern for pattern in (parse_pattern(r) for r in replacements if isinstance(r, str))
            if not pattern.is_wildcard or matching.is_wildcard
        )
        if replacing:
            matchers.append(PathMatcher(matching=matching, replacing=replacing))
    return matchers


def create_path_mapper(config: ProjectConfig) -> Optional[PathMapper]:
    """Build a mapper from a loaded tsconfig, or None if it defines no paths."""
    if not isinstance(config.base_url, str) or not isinstance(config.paths, dict):
        logger.debug(f"TSConfig at {config.config_path} does not define any paths mappings")
        return None

    return PathMapper(
        root_path=config.root_path,
        base_path=os.path.normpath(os.path.join(config.root_path, config.base_url)),
        matchers=compile_matchers(config.paths),
        config_path=config.config_path
    )


def create_path_mappers(options: Dict[str, Any]) -> Tuple[PathMapper, ...]:
    """
    Build mappers for every project config.

    Args:
        options: ``{"cwd": str, "project": str | list[str] | None}``

    Returns:
        Mappers for the configs that loaded and define path aliases
    """
    mappers = []
    for config_path in locate_configs(options['cwd'], options.get('project')):
        config = load_tsconfig(config_path)
        if config is None:
            continue
        mapper = create_path_mapper(config)
        if mapper is not None:
            mappers.append(mapper)

    logger.debug(f"Built {len(mappers)} path mapper(s) for project {options.get('project')!r}")
    return tuple(mappers)
