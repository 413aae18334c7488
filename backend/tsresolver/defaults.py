"""
Default resolver configuration.

The defaults favour TypeScript sources and declarations over compiled
JavaScript, and the package.json fields that point at typings over the
plain ``main`` entry.
"""

from typing import Any, Dict, Optional

TYPES_MAIN_FIELDS = ('types', 'typings', 'module', 'jsnext:main', 'main')


def default_package_filter(pkg: Dict[str, Any]) -> Dict[str, Any]:
    """Point ``main`` at the package's declared types/typings/module entry."""
    for field_name in TYPES_MAIN_FIELDS:
        value = pkg.get(field_name)
        if value:
            pkg['main'] = value
            break
    return pkg


DEFAULT_RESOLVER_OPTIONS: Dict[str, Any] = {
    # .mts, .cts, .d.mts, .d.cts, .mjs and .cjs must be imported explicitly
    'extensions': ['.ts', '.tsx', '.d.ts', '.js', '.jsx', '.json', '.node'],
    'extension_alias': {
        '.js': ['.ts', '.tsx', '.d.ts', '.js'],
        '.jsx': ['.tsx', '.d.ts', '.jsx'],
        '.cjs': ['.cts', '.d.cts', '.cjs'],
        '.mjs': ['.mts', '.d.mts', '.mjs'],
    },
    'main_fields': [
        'types',
        'typings',
        # Angular Package Format
        'fesm2020',
        'fesm2015',
        'esm2020',
        'es2020',
        'module',
        'jsnext:main',
        'main',
    ],
    'condition_names': [
        'types',
        'import',
        # Angular Package Format
        'esm2020',
        'es2020',
        'es2015',
        'require',
        'node',
        'node-addons',
        'browser',
        'default',
    ],
    'package_filter': default_package_filter,
    'module_directories': ['node_modules'],
}

DEFAULT_CONFIG: Dict[str, Any] = {
    'always_try_types': False,
    'project': './tsconfig.json',
    'resolver': DEFAULT_RESOLVER_OPTIONS,
}

# Accepted at the top level for compatibility, applied to the resolver options
TOP_LEVEL_RESOLVER_KEYS = ('extensions', 'package_filter')


def normalize_config(config: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Merge a user configuration over DEFAULT_CONFIG.

    Top-level keys replace the defaults; the nested ``resolver`` options are
    merged one level deep. The input is never modified.

    Args:
        config: User configuration, or None

    Returns:
        A new, complete configuration dict
    """
    config = config or {}
    overrides = {key: config[key] for key in TOP_LEVEL_RESOLVER_KEYS if config.get(key) is not None}
    overrides.update(config.get('resolver') or {})
    if overrides:
        resolver = dict(DEFAULT_RESOLVER_OPTIONS)
        resolver.update(overrides)
    else:
        # Shared default object, so caches can hit by identity
        resolver = DEFAULT_RESOLVER_OPTIONS

    normalized = dict(DEFAULT_CONFIG)
    normalized.update({k: v for k, v in config.items() if k not in TOP_LEVEL_RESOLVER_KEYS})
    normalized['resolver'] = resolver
    if normalized.get('always_try_types') is None:
        normalized['always_try_types'] = False
    return normalized
