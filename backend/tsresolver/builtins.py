"""
Node.js built-in module table.

Built-in specifiers resolve to "found, no path" before any configuration
or filesystem work happens.
"""

from typing import FrozenSet

NODE_SCHEME = 'node:'

# Node.js core modules (built-in), including public subpath modules
CORE_MODULES: FrozenSet[str] = frozenset({
    'assert', 'assert/strict', 'async_hooks', 'buffer', 'child_process',
    'cluster', 'console', 'constants', 'crypto', 'dgram', 'diagnostics_channel',
    'dns', 'dns/promises', 'domain', 'events', 'fs', 'fs/promises', 'http',
    'http2', 'https', 'inspector', 'inspector/promises', 'module', 'net', 'os',
    'path', 'path/posix', 'path/win32', 'perf_hooks', 'process', 'punycode',
    'querystring', 'readline', 'readline/promises', 'repl', 'stream',
    'stream/consumers', 'stream/promises', 'stream/web', 'string_decoder',
    'sys', 'timers', 'timers/promises', 'tls', 'trace_events', 'tty', 'url',
    'util', 'util/types', 'v8', 'vm', 'wasi', 'worker_threads', 'zlib',
    # legacy internals still exposed to require()
    '_http_agent', '_http_client', '_http_common', '_http_incoming',
    '_http_outgoing', '_http_server', '_stream_duplex', '_stream_passthrough',
    '_stream_readable', '_stream_transform', '_stream_wrap', '_stream_writable',
    '_tls_common', '_tls_wrap',
})

# Only reachable through the node: scheme
SCHEME_ONLY_MODULES: FrozenSet[str] = frozenset({
    'sea', 'sqlite', 'test', 'test/reporters',
})


def is_builtin_module(specifier: str) -> bool:
    """Check whether ``specifier`` names a Node.js built-in module."""
    if specifier.startswith(NODE_SCHEME):
        name = specifier[len(NODE_SCHEME):]
        return name in CORE_MODULES or name in SCHEME_ONLY_MODULES
    return specifier in CORE_MODULES
