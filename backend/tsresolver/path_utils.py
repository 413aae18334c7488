"""
Helpers for classifying import specifiers and resolved paths.
"""

import os
import re
from typing import Optional

RE_JS = re.compile(r'\.[cm]?jsx?$', re.IGNORECASE)
RE_RELATIVE = re.compile(r'^\.{1,2}(?:[/\\].*)?$', re.DOTALL)
RE_PACKAGE = re.compile(r'^(?:@([^/\\]+?)[/\\])?([^/\\]+?)(?:[/\\].*)?$', re.DOTALL)
RE_SCHEME = re.compile(r'^[a-zA-Z][a-zA-Z0-9+.-]*:')

TYPES_SCOPE = 'types'


def remove_query_string(specifier: str) -> str:
    """Drop everything from the first ``?`` on (e.g. ``./style.css?inline``)."""
    index = specifier.find('?')
    return specifier[:index] if index >= 0 else specifier


def has_js_extension(path: str) -> bool:
    """True for plain script files: .js, .jsx, .cjs, .mjs and their jsx forms."""
    return RE_JS.search(path) is not None


def is_relative(specifier: str) -> bool:
    return RE_RELATIVE.match(specifier) is not None


def is_absolute(specifier: str) -> bool:
    return os.path.isabs(specifier) or specifier.startswith(('/', '\\'))


def get_types_package_name(specifier: str) -> Optional[str]:
    """
    Derive the DefinitelyTyped package name for a bare specifier.

    ``lodash`` -> ``@types/lodash``, ``@babel/core`` -> ``@types/babel__core``.
    Subpath imports derive from the package root, so ``@scope/pkg/sub``
    -> ``@types/scope__pkg``.

    Args:
        specifier: Import specifier with the query string already removed

    Returns:
        The types package name, or None when the specifier is relative,
        absolute, carries a URL-like scheme or is already under @types
    """
    if not specifier or is_relative(specifier) or is_absolute(specifier):
        return None
    if RE_SCHEME.match(specifier):
        return None

    match = RE_PACKAGE.match(specifier)
    if not match:
        return None

    scope, name = match.group(1), match.group(2)
    if scope == TYPES_SCOPE:
        return None
    if specifier.startswith('@') and scope is None:
        # A lone "@scope" names no package
        return None

    return f"@types/{scope + '__' if scope else ''}{name}"
