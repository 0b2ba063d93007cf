"""
Tests for MockVault CLI

Tests command-line handling including:
- Config building from YAML and flags
- serve startup and error exits
- validate reporting
"""

import argparse
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from mockvault import cli
from mockvault.event import EventScope


VALID_PROJECTS = {
    'projects': [{
        'id': 'users',
        'name': 'Users API',
        'ports': [{
            'id': 'v1',
            'operations': [
                {'id': 'list', 'uri': '/users', 'mock_responses': [{'body': '[]'}]},
                {'id': 'echo', 'uri': '/echo', 'status': 'ECHO'},
            ]
        }]
    }]
}


def write_yaml(data):
    with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
        yaml.safe_dump(data, f)
        return f.name


def serve_args(projects_file, **overrides):
    values = {
        'projects_file': projects_file,
        'config': None,
        'host': None,
        'port': None,
        'max_events': None,
        'event_scope': None,
        'no_admin': False,
        'log_level': None,
    }
    values.update(overrides)
    return argparse.Namespace(**values)


@pytest.fixture
def projects_file():
    path = write_yaml(VALID_PROJECTS)
    yield path
    Path(path).unlink()


class TestBuildConfig:
    """Test build_config."""

    def test_flags_only(self, projects_file):
        config = cli.build_config(serve_args(projects_file, port=9000, max_events=50, event_scope='operation'))

        assert config.port == 9000
        assert config.max_event_count == 50
        assert config.event_scope == EventScope.OPERATION
        assert config.projects_file == projects_file

    def test_flags_override_yaml(self, projects_file):
        config_file = write_yaml({'max_event_count': 10, 'host': '0.0.0.0'})
        try:
            config = cli.build_config(serve_args(projects_file, config=config_file, max_events=20, no_admin=True))
        finally:
            Path(config_file).unlink()

        assert config.max_event_count == 20
        assert config.host == '0.0.0.0'
        assert config.admin_enabled is False


class TestServeCommand:
    """Test the serve command."""

    @patch('mockvault.mock.server.MockServer.start')
    def test_serve_starts_server(self, mock_start, projects_file):
        cli.main(['serve', projects_file, '--port', '9001'])

        mock_start.assert_called_once()

    def test_serve_invalid_max_events(self, projects_file):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(['serve', projects_file, '--max-events', '0'])

        assert exc_info.value.code == 1

    def test_serve_missing_projects_file(self):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(['serve', '/nonexistent/projects.yaml'])

        assert exc_info.value.code == 1


class TestValidateCommand:
    """Test the validate command."""

    def test_validate_ok(self, projects_file, capsys):
        cli.main(['validate', projects_file])

        output = capsys.readouterr().out
        assert 'Users API' in output
        assert 'MOCKED: 1' in output
        assert '1 projects OK' in output

    def test_validate_reports_problems(self, capsys):
        path = write_yaml({'projects': [{
            'name': 'Broken',
            'ports': [{'operations': [
                {'name': 'Forward', 'status': 'FORWARDED'},
                {'name': 'Nothing', 'mock_responses': [{'enabled': False}]},
            ]}]
        }]})
        try:
            with pytest.raises(SystemExit) as exc_info:
                cli.main(['validate', path])
        finally:
            Path(path).unlink()

        output = capsys.readouterr().out
        assert exc_info.value.code == 1
        assert 'Forward is forwarded but has no forwarded_endpoint' in output
        assert 'Nothing is mocked but has no enabled mock response' in output

    def test_validate_rejects_invalid_sequence_position(self, capsys):
        path = write_yaml({'projects': [{
            'name': 'Broken',
            'ports': [{'operations': [
                {'name': 'List', 'mock_responses': [{'sequence_position': 0}]},
            ]}]
        }]})
        try:
            with pytest.raises(SystemExit) as exc_info:
                cli.main(['validate', path])
        finally:
            Path(path).unlink()

        assert exc_info.value.code == 1
        assert 'sequence_position must be a positive integer' in capsys.readouterr().out

    def test_no_command(self):
        with pytest.raises(SystemExit):
            cli.main([])
