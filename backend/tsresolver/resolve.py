"""
Import resolution entry point.

ImportResolver.resolve runs the layers in order: built-in modules, tsconfig
path aliases, Node-style file resolution, then the @types fallback for
specifiers that only resolved to plain JavaScript.
"""

import logging
import os
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .builtins import is_builtin_module
from .defaults import normalize_config
from .models import ResolverResult
from .path_mapper import PathMapper, create_path_mappers
from .path_utils import get_types_package_name, has_js_extension, remove_query_string
from .source_resolver import NodeSourceResolver, SourceResolver
from .structural_cache import StructuralCache

logger = logging.getLogger(__name__)

DEFAULT_CACHE_SIZE = 32

SourceResolverFactory = Callable[[Dict[str, Any]], SourceResolver]
PathMappersFactory = Callable[[Dict[str, Any]], Sequence[PathMapper]]


def select_best_mapper(mappers: Sequence[PathMapper], directory: str) -> Optional[PathMapper]:
    """
    Pick the mapper of the most specific project containing ``directory``.

    Args:
        mappers: Candidate mappers
        directory: Directory of the importing file

    Returns:
        The mapper with the longest root_path that contains ``directory``,
        or None if no project contains it
    """
    best_mapper = None
    best_score = -1
    for mapper in mappers:
        root = mapper.root_path
        contains = directory == root or directory.startswith(root.rstrip(os.sep) + os.sep)
        if contains and len(root) > best_score:
            best_mapper = mapper
            best_score = len(root)
    return best_mapper


def apply_path_mapping(mappers: Sequence[PathMapper], specifier: str, directory: str) -> List[str]:
    """Return the specifiers to try: mapped candidates, or the specifier itself."""
    mapper = select_best_mapper(mappers, directory)
    if mapper is not None:
        paths = mapper.map(specifier)
        if paths:
            logger.debug(f"Mapped {specifier} to: {paths}")
            return paths
    return [specifier]


def resolve_first(resolver: SourceResolver, specifiers: Sequence[str],
                  directory: str, file: str) -> Tuple[Optional[str], Optional[str]]:
    """Try ``specifiers`` in order; return ``(specifier, path)`` of the first hit."""
    for specifier in specifiers:
        path = resolver.resolve(specifier, directory, file)
        if path is not None:
            return specifier, path
    return None, None


class ImportResolver:
    """Resolves import specifiers, memoizing per-configuration state.

    One instance owns the compiled path mappers and file resolvers for every
    configuration it has seen. Drop the instance (or call ``clear_caches``)
    when tsconfig or package.json files change on disk.
    """

    def __init__(self,
                 cwd: Optional[str] = None,
                 cache_size: int = DEFAULT_CACHE_SIZE,
                 source_resolver_factory: SourceResolverFactory = NodeSourceResolver,
                 path_mappers_factory: PathMappersFactory = create_path_mappers):
        """
        Initialize the resolver.

        Args:
            cwd: Working directory for relative files and project specs
                (default: the process working directory at call time)
            cache_size: Maximum entries per cache; 0 disables caching
            source_resolver_factory: Builds the file resolver from resolver options
            path_mappers_factory: Builds the mappers from ``{cwd, project}``
        """
        self.cwd = cwd
        self.source_resolver_factory = source_resolver_factory
        self.path_mappers_factory = path_mappers_factory
        self.source_resolver_cache: StructuralCache[Dict[str, Any], SourceResolver] = \
            StructuralCache(max_size=cache_size)
        self.path_mapper_cache: StructuralCache[Dict[str, Any], Sequence[PathMapper]] = \
            StructuralCache(max_size=cache_size)

    def clear_caches(self) -> None:
        self.source_resolver_cache.clear()
        self.path_mapper_cache.clear()

    def resolve(self, specifier: str, file: str,
                config: Optional[Dict[str, Any]] = None) -> ResolverResult:
        """
        Resolve ``specifier`` as imported from ``file``.

        Args:
            specifier: The import specifier as written in source
            file: Path of the importing file
            config: Resolver configuration (see ``defaults.DEFAULT_CONFIG``)

        Returns:
            ResolverResult: a path, a built-in marker, or not found
        """
        logger.debug(f"Resolving {specifier} in {file}...")

        # Core modules first, it is the cheapest test
        specifier = remove_query_string(specifier)
        if is_builtin_module(specifier):
            logger.debug(f"Matched {specifier} as a core module")
            return ResolverResult.builtin()

        config = normalize_config(config)

        cwd = self.cwd or os.getcwd()
        source_file = os.path.normpath(os.path.join(cwd, file))
        source_directory = os.path.dirname(source_file)

        source_resolver = self.source_resolver_cache.get_or_create(
            config['resolver'], self.source_resolver_factory)
        path_mappers = self.path_mapper_cache.get_or_create(
            {'cwd': cwd, 'project': config['project']}, self.path_mappers_factory)

        specifiers = apply_path_mapping(path_mappers, specifier, source_directory)
        return self._resolve_internal(source_resolver, specifiers, source_directory,
                                      source_file, config)

    def _resolve_internal(self, source_resolver: SourceResolver, specifiers: Sequence[str],
                          source_directory: str, source_file: str,
                          config: Dict[str, Any]) -> ResolverResult:
        resolved_specifier, resolved_path = resolve_first(
            source_resolver, specifiers, source_directory, source_file)

        # Plain JavaScript (or nothing at all) may have a separate @types package
        if resolved_path is None:
            should_try_types = bool(config.get('always_try_types'))
        else:
            should_try_types = has_js_extension(resolved_path)

        if should_try_types:
            types_candidates = specifiers if resolved_path is None else [resolved_specifier]
            for candidate in types_candidates:
                types_specifier = get_types_package_name(candidate)
                if types_specifier is None:
                    continue
                types_path = source_resolver.resolve(types_specifier, source_directory, source_file)
                if types_path is not None:
                    logger.debug(f"Preferring {types_specifier} declarations over {resolved_path}")
                    resolved_specifier, resolved_path = types_specifier, types_path
                    break

        if resolved_path is None:
            logger.debug(f"In file {source_file} could not resolve any of: {list(specifiers)}")
            return ResolverResult.not_found()

        logger.debug(f"Resolved {resolved_specifier} to {resolved_path}")
        return ResolverResult.found_at(resolved_path)
