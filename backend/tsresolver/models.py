"""
Data models for the import resolver.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union


class ResultKind(Enum):
    """Enumeration of resolution outcomes."""
    FOUND = "found"
    BUILTIN = "builtin"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class ResolverResult:
    """Outcome of resolving one specifier.

    ``found=True, path=None`` marks a built-in module: the specifier is
    valid but there is no file behind it.
    """
    found: bool
    path: Optional[str] = None

    @classmethod
    def found_at(cls, path: str) -> 'ResolverResult':
        return cls(found=True, path=path)

    @classmethod
    def builtin(cls) -> 'ResolverResult':
        return cls(found=True, path=None)

    @classmethod
    def not_found(cls) -> 'ResolverResult':
        return cls(found=False, path=None)

    @property
    def kind(self) -> ResultKind:
        if not self.found:
            return ResultKind.NOT_FOUND
        if self.path is None:
            return ResultKind.BUILTIN
        return ResultKind.FOUND

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the host-facing result shape."""
        if not self.found:
            return {'found': False}
        return {'found': True, 'path': self.path}


@dataclass(frozen=True)
class StaticPattern:
    """Path pattern without a wildcard; matches by string equality."""
    pattern: str

    @property
    def is_wildcard(self) -> bool:
        return False


@dataclass(frozen=True)
class WildcardPattern:
    """Path pattern with a single ``*`` between ``prefix`` and ``suffix``."""
    prefix: str
    suffix: str

    @property
    def is_wildcard(self) -> bool:
        return True


PathPattern = Union[StaticPattern, WildcardPattern]


@dataclass(frozen=True)
class PathMatcher:
    """One ``compilerOptions.paths`` entry compiled into patterns."""
    matching: PathPattern
    replacing: Tuple[PathPattern, ...]


@dataclass(frozen=True)
class ProjectConfig:
    """A tsconfig file after its ``extends`` chain has been merged in."""
    config_path: str  # The file originally requested, not any parent
    root_path: str  # Directory containing config_path
    base_url: Optional[str] = None
    paths: Optional[Dict[str, List[str]]] = None
    extends: Optional[Union[str, List[str]]] = None
    compiler_options: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: Dict[str, Any], config_path: str, root_path: str) -> 'ProjectConfig':
        """Create from a parsed (and merged) tsconfig document."""
        compiler_options = raw.get('compilerOptions')
        if not isinstance(compiler_options, dict):
            compiler_options = {}

        return cls(
            config_path=config_path,
            root_path=root_path,
            base_url=compiler_options.get('baseUrl'),
            paths=compiler_options.get('paths'),
            extends=raw.get('extends'),
            compiler_options=compiler_options
        )
