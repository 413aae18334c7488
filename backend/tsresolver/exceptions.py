"""
Custom exceptions for the tsresolver package.

Expected "can't resolve" outcomes are never raised to callers of
ImportResolver.resolve; these exceptions carry structured context between
the configuration loaders and the boundary that logs them.
"""

from typing import List, Optional


class ResolverError(Exception):
    """Base exception for resolver errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to a serializable error record."""
        return {
            'type': self.__class__.__name__,
            'message': self.message,
            'details': self.details
        }


class ConfigurationError(ResolverError):
    """Invalid or unreadable configuration."""

    def __init__(self, message: str, config_file: Optional[str] = None):
        super().__init__(
            message,
            details={'config_file': config_file}
        )
        self.config_file = config_file


class CyclicExtendsError(ConfigurationError):
    """A tsconfig `extends` chain refers back to a file already loaded."""

    def __init__(self, config_file: str, chain: List[str]):
        super().__init__(
            f"Circular 'extends' in {config_file}: {' -> '.join(chain + [config_file])}",
            config_file=config_file
        )
        self.chain = list(chain)
        self.details['chain'] = self.chain
