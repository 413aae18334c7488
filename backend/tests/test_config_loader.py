"""
Tests for resolver settings files and environment configuration.
"""

import json
import logging

from tsresolver.config import get_config, setup_logging
from tsresolver.config_loader import ConfigLoader, ResolverSettings
from tsresolver.exceptions import ConfigurationError, CyclicExtendsError


def test_defaults_when_no_settings_file(tmp_path):
    settings = ConfigLoader.load(tmp_path)

    assert settings == ResolverSettings()
    assert settings.to_resolver_config() == {'always_try_types': False}


def test_load_yaml_settings(tmp_path):
    (tmp_path / '.tsresolver.yaml').write_text(
        'always_try_types: true\n'
        'project:\n'
        '  - packages/*/tsconfig.json\n'
        'extensions: [".ts", ".js"]\n'
        'cache_size: 4\n',
        encoding='utf-8'
    )

    settings = ConfigLoader.load(str(tmp_path))

    assert settings.cache_size == 4
    assert settings.to_resolver_config() == {
        'always_try_types': True,
        'project': ['packages/*/tsconfig.json'],
        'resolver': {'extensions': ['.ts', '.js']},
    }


def test_json_settings_take_precedence(tmp_path):
    (tmp_path / '.tsresolver.json').write_text(json.dumps({'project': 'a.json'}), encoding='utf-8')
    (tmp_path / '.tsresolver.yml').write_text('project: b.json\n', encoding='utf-8')

    assert ConfigLoader.load(tmp_path).project == 'a.json'


def test_unknown_keys_are_ignored(tmp_path, caplog):
    (tmp_path / '.tsresolver.json').write_text(json.dumps({'bogus': 1, 'main_fields': ['main']}),
                                               encoding='utf-8')

    with caplog.at_level(logging.WARNING, logger='tsresolver'):
        settings = ConfigLoader.load(tmp_path)

    assert settings.main_fields == ['main']
    assert 'bogus' in caplog.text


def test_invalid_settings_fall_back_to_defaults(tmp_path, caplog):
    (tmp_path / '.tsresolver.yaml').write_text('project: [unclosed\n', encoding='utf-8')

    with caplog.at_level(logging.ERROR, logger='tsresolver'):
        settings = ConfigLoader.load(tmp_path)

    assert settings == ResolverSettings()
    assert 'Failed to parse settings file' in caplog.text


def test_non_mapping_settings_fall_back_to_defaults(tmp_path):
    (tmp_path / '.tsresolver.json').write_text('[1, 2]', encoding='utf-8')
    assert ConfigLoader.load(tmp_path) == ResolverSettings()


def test_get_config_reads_environment(monkeypatch):
    monkeypatch.setenv('TSRESOLVER_LOG_LEVEL', 'DEBUG')
    monkeypatch.setenv('TSRESOLVER_CACHE_SIZE', '8')
    monkeypatch.delenv('TSRESOLVER_LOG_FILE', raising=False)
    monkeypatch.delenv('TSRESOLVER_CWD', raising=False)

    config = get_config()

    assert config == {'LOG_LEVEL': 'DEBUG', 'LOG_FILE': None, 'CACHE_SIZE': 8, 'CWD': None}


def test_setup_logging_with_file(tmp_path):
    log_file = tmp_path / 'logs' / 'resolver.log'
    logger = setup_logging('info', str(log_file))
    try:
        assert logger.level == logging.INFO
        assert len(logger.handlers) == 2
        logger.info('hello')
        for handler in logger.handlers:
            handler.flush()
        assert 'hello' in log_file.read_text(encoding='utf-8')
    finally:
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)


def test_exceptions_serialize():
    error = CyclicExtendsError('/p/a.json', ['/p/a.json', '/p/b.json'])

    assert isinstance(error, ConfigurationError)
    data = error.to_dict()
    assert data['type'] == 'CyclicExtendsError'
    assert data['details']['config_file'] == '/p/a.json'
    assert data['details']['chain'] == ['/p/a.json', '/p/b.json']
    assert '/p/a.json -> /p/b.json -> /p/a.json' in data['message']
