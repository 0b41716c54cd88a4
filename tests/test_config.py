"""Tests for configuration loading"""

import pytest

from layer_balancer.common.config import Config, load_config
from layer_balancer.common.errors import ConfigurationError

ENV_VARS = [
    'LB_LOG_LEVEL', 'LB_LOG_FORMAT', 'AWS_PROFILE', 'LB_RETRY_ATTEMPTS', 'LB_RETRY_MIN_WAIT',
    'LB_RETRY_MAX_WAIT', 'LB_DOWNLOAD_TIMEOUT_SECONDS', 'LB_DOWNLOAD_CHUNK_SIZE',
    'LB_STRICT_NUMBERING', 'LB_METRICS_TEXTFILE',
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = load_config()

    assert config.LOG_LEVEL == 'WARNING'
    assert config.LOG_FORMAT == 'simple'
    assert config.AWS_PROFILE is None
    assert config.RETRY_ATTEMPTS == 1
    assert config.DOWNLOAD_TIMEOUT_SECONDS == 300
    assert config.DOWNLOAD_CHUNK_SIZE == 65536
    assert config.STRICT_NUMBERING is False
    assert config.METRICS_TEXTFILE is None


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv('LB_LOG_LEVEL', 'DEBUG')
    monkeypatch.setenv('LB_LOG_FORMAT', 'structured')
    monkeypatch.setenv('AWS_PROFILE', 'deploy')
    monkeypatch.setenv('LB_RETRY_ATTEMPTS', '3')
    monkeypatch.setenv('LB_STRICT_NUMBERING', 'true')
    monkeypatch.setenv('LB_METRICS_TEXTFILE', '/var/lib/node_exporter/lb.prom')

    config = load_config()

    assert config.LOG_LEVEL == 'DEBUG'
    assert config.LOG_FORMAT == 'structured'
    assert config.AWS_PROFILE == 'deploy'
    assert config.RETRY_ATTEMPTS == 3
    assert config.STRICT_NUMBERING is True
    assert config.METRICS_TEXTFILE == '/var/lib/node_exporter/lb.prom'


def test_invalid_integer_env(monkeypatch):
    monkeypatch.setenv('LB_RETRY_ATTEMPTS', 'many')

    with pytest.raises(ConfigurationError, match="LB_RETRY_ATTEMPTS"):
        Config()


def test_yaml_file_overrides_environment(tmp_path, monkeypatch):
    monkeypatch.setenv('LB_RETRY_ATTEMPTS', '2')
    path = tmp_path / "lb.yaml"
    path.write_text("retry_attempts: 5\nstrict_numbering: true\nlog_format: structured\n")

    config = load_config(str(path))

    assert config.RETRY_ATTEMPTS == 5
    assert config.STRICT_NUMBERING is True
    assert config.LOG_FORMAT == 'structured'


def test_empty_yaml_file(tmp_path):
    path = tmp_path / "lb.yaml"
    path.write_text("")

    assert load_config(str(path)).RETRY_ATTEMPTS == 1


def test_unknown_yaml_key(tmp_path):
    path = tmp_path / "lb.yaml"
    path.write_text("regions: [us-east-1]\n")

    with pytest.raises(ConfigurationError, match="Unknown configuration key 'regions'"):
        load_config(str(path))


def test_missing_file(tmp_path):
    with pytest.raises(ConfigurationError, match="Failed to load config file"):
        load_config(str(tmp_path / "missing.yaml"))


def test_non_mapping_file(tmp_path):
    path = tmp_path / "lb.yaml"
    path.write_text("- one\n- two\n")

    with pytest.raises(ConfigurationError, match="must contain a mapping"):
        load_config(str(path))


@pytest.mark.parametrize("field, value", [
    ('RETRY_ATTEMPTS', 0),
    ('DOWNLOAD_TIMEOUT_SECONDS', 0),
    ('DOWNLOAD_CHUNK_SIZE', -1),
    ('LOG_FORMAT', 'xml'),
    ('LOG_LEVEL', 'LOUD'),
    ('RETRY_MAX_WAIT', 0.5),
])
def test_validation(field, value):
    config = Config()
    setattr(config, field, value)

    with pytest.raises(ConfigurationError):
        config.validate()


def test_yaml_values_are_converted_to_field_types(tmp_path):
    path = tmp_path / "lb.yaml"
    path.write_text(
        "retry_attempts: '3'\nretry_max_wait: 30\nstrict_numbering: 'false'\nmetrics_textfile: ''\n"
    )

    config = load_config(str(path))

    assert config.RETRY_ATTEMPTS == 3
    assert config.RETRY_MAX_WAIT == 30.0
    assert isinstance(config.RETRY_MAX_WAIT, float)
    assert config.STRICT_NUMBERING is False
    assert config.METRICS_TEXTFILE is None


@pytest.mark.parametrize("body, key", [
    ("log_level: 10\n", 'log_level'),
    ("retry_attempts: three\n", 'retry_attempts'),
    ("retry_attempts: true\n", 'retry_attempts'),
    ("download_timeout_seconds: [1, 2]\n", 'download_timeout_seconds'),
    ("strict_numbering: sometimes\n", 'strict_numbering'),
    ("aws_profile: 7\n", 'aws_profile'),
])
def test_wrong_typed_yaml_value(tmp_path, body, key):
    path = tmp_path / "lb.yaml"
    path.write_text(body)

    with pytest.raises(ConfigurationError, match=f"^{key} must be"):
        load_config(str(path))


def test_invalid_env_error_chains_cause(monkeypatch):
    monkeypatch.setenv('LB_DOWNLOAD_TIMEOUT_SECONDS', 'slow')

    with pytest.raises(ConfigurationError) as exc_info:
        Config()

    assert isinstance(exc_info.value.__cause__, ValueError)


def test_invalid_boolean_env(monkeypatch):
    monkeypatch.setenv('LB_STRICT_NUMBERING', 'maybe')

    with pytest.raises(ConfigurationError, match="LB_STRICT_NUMBERING must be a boolean"):
        Config()
