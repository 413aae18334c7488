"""
Tests for the Node-style file resolver.
"""

import json
import logging

import pytest

from tsresolver.defaults import DEFAULT_RESOLVER_OPTIONS, default_package_filter
from tsresolver.source_resolver import NodeSourceResolver, split_package_specifier


def touch(path, content=''):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding='utf-8')
    return path


def write_package(directory, data):
    return touch(directory / 'package.json', json.dumps(data))


@pytest.fixture
def resolver():
    return NodeSourceResolver(DEFAULT_RESOLVER_OPTIONS)


def resolve(resolver, specifier, directory):
    return resolver.resolve(specifier, str(directory), str(directory / 'index.ts'))


def test_relative_extension_probing_prefers_ts(resolver, tmp_path):
    touch(tmp_path / 'util.ts')
    touch(tmp_path / 'util.js')

    assert resolve(resolver, './util', tmp_path) == str(tmp_path / 'util.ts')


def test_exact_file(resolver, tmp_path):
    touch(tmp_path / 'data.json')
    assert resolve(resolver, './data.json', tmp_path) == str(tmp_path / 'data.json')


def test_js_extension_alias_finds_ts_source(resolver, tmp_path):
    touch(tmp_path / 'lib' / 'thing.ts')
    assert resolve(resolver, '../lib/thing.js', tmp_path / 'src') == str(tmp_path / 'lib' / 'thing.ts')


def test_directory_index(resolver, tmp_path):
    touch(tmp_path / 'components' / 'index.tsx')
    assert resolve(resolver, './components', tmp_path) == str(tmp_path / 'components' / 'index.tsx')


def test_absolute_specifier(resolver, tmp_path):
    target = touch(tmp_path / 'abs' / 'mod.ts')
    assert resolve(resolver, str(tmp_path / 'abs' / 'mod'), tmp_path / 'elsewhere') == str(target)


def test_missing_file_returns_none(resolver, tmp_path):
    assert resolve(resolver, './nope', tmp_path) is None


def test_package_main_field(resolver, tmp_path):
    pkg = tmp_path / 'node_modules' / 'left-pad'
    write_package(pkg, {'name': 'left-pad', 'main': 'lib/index.js'})
    touch(pkg / 'lib' / 'index.js')

    assert resolve(resolver, 'left-pad', tmp_path / 'src' / 'deep') == str(pkg / 'lib' / 'index.js')


def test_package_types_field_wins(resolver, tmp_path):
    pkg = tmp_path / 'node_modules' / 'typed'
    write_package(pkg, {'name': 'typed', 'main': 'index.js', 'types': 'index.d.ts'})
    touch(pkg / 'index.js')
    touch(pkg / 'index.d.ts')

    assert resolve(resolver, 'typed', tmp_path) == str(pkg / 'index.d.ts')


def test_scoped_package_subpath(resolver, tmp_path):
    pkg = tmp_path / 'node_modules' / '@scope' / 'pkg'
    write_package(pkg, {'name': '@scope/pkg'})
    touch(pkg / 'sub.js')

    assert resolve(resolver, '@scope/pkg/sub', tmp_path) == str(pkg / 'sub.js')


def test_exports_conditions(resolver, tmp_path):
    pkg = tmp_path / 'node_modules' / 'modern'
    write_package(pkg, {
        'name': 'modern',
        'exports': {
            '.': {'types': './dist/index.d.ts', 'default': './dist/index.js'},
            './feature/*': './dist/feature/*.js',
        }
    })
    touch(pkg / 'dist' / 'index.d.ts')
    touch(pkg / 'dist' / 'index.js')
    touch(pkg / 'dist' / 'feature' / 'a.js')

    assert resolve(resolver, 'modern', tmp_path) == str(pkg / 'dist' / 'index.d.ts')
    assert resolve(resolver, 'modern/feature/a', tmp_path) == str(pkg / 'dist' / 'feature' / 'a.js')
    assert resolve(resolver, 'modern/dist/index.js', tmp_path) is None


def test_package_filter_applied_to_manifest(tmp_path):
    calls = []

    def package_filter(pkg):
        calls.append(pkg['name'])
        pkg['main'] = 'alt.js'
        return pkg

    resolver = NodeSourceResolver({'extensions': ['.js'], 'main_fields': ['main'],
                                   'package_filter': package_filter})
    pkg = tmp_path / 'node_modules' / 'filtered'
    write_package(pkg, {'name': 'filtered', 'main': 'index.js'})
    touch(pkg / 'index.js')
    touch(pkg / 'alt.js')

    assert resolve(resolver, 'filtered', tmp_path) == str(pkg / 'alt.js')
    assert resolve(resolver, 'filtered', tmp_path) == str(pkg / 'alt.js')
    assert calls == ['filtered']


def test_broken_package_json_falls_back_to_index(resolver, tmp_path):
    pkg = tmp_path / 'node_modules' / 'broken'
    touch(pkg / 'package.json', '{not json')
    touch(pkg / 'index.js')

    assert resolve(resolver, 'broken', tmp_path) == str(pkg / 'index.js')


def test_failing_package_filter_uses_unfiltered_manifest(tmp_path, caplog):
    def package_filter(pkg):
        return dict(pkg, main=pkg['module'])

    resolver = NodeSourceResolver({'extensions': ['.js'], 'main_fields': ['main'],
                                   'package_filter': package_filter})
    pkg = tmp_path / 'node_modules' / 'dep'
    write_package(pkg, {'name': 'dep', 'main': 'lib/main.js'})
    touch(pkg / 'lib' / 'main.js')

    with caplog.at_level(logging.WARNING, logger='tsresolver'):
        assert resolve(resolver, 'dep', tmp_path) == str(pkg / 'lib' / 'main.js')
    assert 'package_filter failed' in caplog.text


def test_package_filter_returning_non_dict_is_ignored(tmp_path):
    resolver = NodeSourceResolver({'extensions': ['.js'], 'main_fields': ['main'],
                                   'package_filter': lambda pkg: None})
    pkg = tmp_path / 'node_modules' / 'dep'
    write_package(pkg, {'name': 'dep', 'main': 'lib/main.js'})
    touch(pkg / 'lib' / 'main.js')

    assert resolve(resolver, 'dep', tmp_path) == str(pkg / 'lib' / 'main.js')


def test_default_package_filter_prefers_types():
    pkg = default_package_filter({'main': 'index.js', 'module': 'index.mjs', 'typings': 'index.d.ts'})
    assert pkg['main'] == 'index.d.ts'

    untouched = default_package_filter({'main': 'index.js'})
    assert untouched['main'] == 'index.js'


@pytest.mark.parametrize('specifier, expected', [
    ('lodash', ('lodash', '.')),
    ('lodash/fp', ('lodash', './fp')),
    ('@scope/pkg', ('@scope/pkg', '.')),
    ('@scope/pkg/a/b', ('@scope/pkg', './a/b')),
    ('@scope', (None, None)),
])
def test_split_package_specifier(specifier, expected):
    assert split_package_specifier(specifier) == expected
