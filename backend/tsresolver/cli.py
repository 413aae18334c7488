"""
Command-line entry point: resolve one specifier and print the result as JSON.
"""

import argparse
import json
import os
import sys
from pathlib import Path
from typing import List, Optional

from .config import get_config, setup_logging
from .config_loader import ConfigLoader, load_settings
from .resolve import ImportResolver


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='tsresolver',
        description='Resolve a JavaScript/TypeScript import specifier to a file.'
    )
    parser.add_argument('specifier', help='Import specifier as written in source')
    parser.add_argument('file', help='File containing the import')
    parser.add_argument('--project', action='append', default=None,
                        help='tsconfig file, directory or glob (repeatable)')
    parser.add_argument('--always-try-types', action='store_true', default=None,
                        help='Look for @types packages even when nothing resolved')
    parser.add_argument('--settings', help='Resolver settings file (.json/.yaml)')
    parser.add_argument('--cwd', help='Working directory (default: current directory)')
    parser.add_argument('--log-level', help='DEBUG, INFO, WARNING, ERROR')
    parser.add_argument('--log-file', help='Also write logs to this file')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the CLI; returns 0 when the specifier was found, 1 otherwise."""
    args = build_parser().parse_args(argv)
    env = get_config()

    setup_logging(args.log_level or env['LOG_LEVEL'], args.log_file or env['LOG_FILE'])

    cwd = os.path.abspath(args.cwd or env['CWD'] or os.getcwd())
    if args.settings:
        settings = ConfigLoader.load_file(Path(args.settings))
    else:
        settings = load_settings(Path(cwd))

    config = settings.to_resolver_config()
    if args.project:
        config['project'] = args.project
    if args.always_try_types is not None:
        config['always_try_types'] = args.always_try_types

    resolver = ImportResolver(cwd=cwd, cache_size=settings.cache_size)
    result = resolver.resolve(args.specifier, args.file, config)

    json.dump(result.to_dict(), sys.stdout)
    sys.stdout.write('\n')
    return 0 if result.found else 1


if __name__ == '__main__':
    sys.exit(main())
