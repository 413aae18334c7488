"""
tsresolver

Resolves JavaScript/TypeScript import specifiers to files, honouring
tsconfig path aliases and falling back to @types declaration packages.
"""

from .models import ResolverResult, ResultKind, ProjectConfig, PathMatcher
from .resolve import ImportResolver
from .source_resolver import NodeSourceResolver, SourceResolver
from .structural_cache import StructuralCache
from .path_mapper import PathMapper, create_path_mapper, create_path_mappers
from .tsconfig import load_tsconfig, locate_configs
from .defaults import DEFAULT_CONFIG, default_package_filter
from .exceptions import ResolverError, ConfigurationError, CyclicExtendsError

__all__ = [
    'ResolverResult', 'ResultKind', 'ProjectConfig', 'PathMatcher',
    'ImportResolver', 'NodeSourceResolver', 'SourceResolver', 'StructuralCache',
    'PathMapper', 'create_path_mapper', 'create_path_mappers',
    'load_tsconfig', 'locate_configs', 'DEFAULT_CONFIG', 'default_package_filter',
    'ResolverError', 'ConfigurationError', 'CyclicExtendsError',
]
