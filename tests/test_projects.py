"""
Tests for MockVault Projects

Tests project definitions including:
- Model conversion from dictionaries
- Loading YAML and JSON definition files
- Hierarchical lookups through ProjectService
- Operation creation defaults and status counts
"""

import json
import tempfile
from pathlib import Path

import pytest
import yaml

from mockvault.errors import OperationNotFound
from mockvault.project import (
    MockResponse,
    Operation,
    OperationStatus,
    Port,
    Project,
    ProjectLoader,
    ProjectService,
    ProjectType,
    ResponseStrategy,
    StatusCategory,
)
from mockvault.repository import InMemoryRepository


@pytest.fixture
def project_data():
    """Sample project definition."""
    return {
        'id': 'proj-1',
        'name': 'Users API',
        'protocol': 'rest',
        'ports': [
            {
                'id': 'port-1',
                'name': 'v1',
                'operations': [
                    {
                        'id': 'get-user',
                        'name': 'GetUser',
                        'http_method': 'get',
                        'uri': '/users/{id}',
                        'status': 'mocked',
                        'response_strategy': 'sequence',
                        'mock_responses': [
                            {'id': 'r1', 'body': '{"id": 1}'},
                            {'id': 'r2', 'http_status_code': 404, 'enabled': False},
                        ],
                        'status_weights': {'success': 3, 'server_error': 0},
                    },
                    {'id': 'delete-user', 'name': 'DeleteUser', 'http_method': 'DELETE'},
                ]
            }
        ]
    }


@pytest.fixture
def temp_definitions(project_data):
    """Write the sample project to YAML and JSON files."""
    paths = []
    with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
        yaml.safe_dump({'projects': [project_data]}, f)
        paths.append(f.name)
    with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
        json.dump([project_data], f)
        paths.append(f.name)

    yield paths

    for path in paths:
        Path(path).unlink()


@pytest.fixture
def service(project_data):
    service = ProjectService(InMemoryRepository())
    service.import_projects([Project.from_dict(project_data)])
    return service


class TestProjectModel:
    """Test model conversion."""

    def test_from_dict(self, project_data):
        project = Project.from_dict(project_data)
        operation = project.operations[0]

        assert project.protocol == ProjectType.REST
        assert project.created is not None
        assert operation.http_method == 'GET'
        assert operation.status == OperationStatus.MOCKED
        assert operation.response_strategy == ResponseStrategy.SEQUENCE
        assert operation.mock_response_ids == ['r1', 'r2']
        assert operation.status_weights == {StatusCategory.SUCCESS: 3.0, StatusCategory.SERVER_ERROR: 0.0}
        assert operation.mock_responses[1].enabled is False

    def test_operation_defaults(self):
        operation = Operation.from_dict({'name': 'Ping'})

        assert operation.status == OperationStatus.MOCKED
        assert operation.response_strategy == ResponseStrategy.RANDOM
        assert operation.id

    @pytest.mark.parametrize('status_code, category', [
        (200, StatusCategory.SUCCESS),
        (204, StatusCategory.SUCCESS),
        (404, StatusCategory.CLIENT_ERROR),
        (503, StatusCategory.SERVER_ERROR),
        (302, StatusCategory.OTHER),
    ])
    def test_status_category(self, status_code, category):
        assert MockResponse(http_status_code=status_code).status_category == category

    def test_sequence_position_string_converted(self):
        response = MockResponse.from_dict({'id': 'r1', 'sequence_position': '2'})

        assert response.sequence_position == 2

    @pytest.mark.parametrize('position', ['first', 0, -1, 1.5, True, [1]])
    def test_invalid_sequence_position(self, position):
        with pytest.raises(ValueError, match='sequence_position'):
            MockResponse.from_dict({'id': 'r1', 'sequence_position': position})

    def test_to_dict_round_trip_keeps_ids(self, project_data):
        project = Project.from_dict(project_data)

        again = Project.from_dict(project.to_dict())

        assert again.id == project.id
        assert again.operations[0].mock_response_ids == ['r1', 'r2']
        assert again.created == project.created


class TestProjectLoader:
    """Test ProjectLoader."""

    def test_load_yaml_and_json(self, temp_definitions):
        for path in temp_definitions:
            projects = ProjectLoader(path).load()

            assert len(projects) == 1
            assert projects[0].name == 'Users API'
            assert len(projects[0].operations) == 2

    def test_load_from_file(self, temp_definitions):
        assert ProjectLoader.load_from_file(temp_definitions[0])[0].id == 'proj-1'

    def test_file_not_found(self):
        with pytest.raises(FileNotFoundError):
            ProjectLoader('/nonexistent/projects.yaml').load()

    def test_unexpected_format(self):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
            json.dump({'items': []}, f)
            path = f.name

        try:
            with pytest.raises(ValueError, match="Expected dict with 'projects' key"):
                ProjectLoader(path).load()
        finally:
            Path(path).unlink()

    def test_empty_projects_key(self):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yml', delete=False) as f:
            f.write('projects:\n')
            path = f.name

        try:
            assert ProjectLoader(path).load() == []
        finally:
            Path(path).unlink()

    def test_quoted_sequence_position(self):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write(
                "- name: Quoted\n"
                "  ports:\n"
                "    - operations:\n"
                "        - mock_responses:\n"
                "            - id: late\n"
                "              sequence_position: '2'\n"
                "            - id: early\n"
            )
            path = f.name

        try:
            operation = ProjectLoader(path).load()[0].operations[0]
        finally:
            Path(path).unlink()

        assert [r.sequence_position for r in operation.mock_responses] == [2, None]

    def test_invalid_sequence_position(self):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
            json.dump([{'name': 'Broken', 'ports': [{'operations': [
                {'mock_responses': [{'sequence_position': 'second'}]}
            ]}]}], f)
            path = f.name

        try:
            with pytest.raises(ValueError, match='sequence_position'):
                ProjectLoader(path).load()
        finally:
            Path(path).unlink()


class TestProjectService:
    """Test ProjectService lookups."""

    def test_find_project(self, service):
        assert service.find_project('proj-1').name == 'Users API'

    def test_find_project_missing(self, service):
        with pytest.raises(LookupError):
            service.find_project('missing')

    def test_find_project_by_name_case_insensitive(self, service):
        assert service.find_project_by_name('users api').id == 'proj-1'
        assert service.find_project_by_name('Other') is None

    def test_find_project_by_empty_name(self, service):
        with pytest.raises(ValueError):
            service.find_project_by_name('')

    def test_find_operation(self, service):
        operation = service.find_operation('proj-1', 'port-1', 'get-user')

        assert operation.name == 'GetUser'

    def test_find_operation_missing(self, service):
        with pytest.raises(OperationNotFound):
            service.find_operation('proj-1', 'port-1', 'missing')

    def test_find_port_missing(self, service):
        with pytest.raises(LookupError):
            service.find_port('proj-1', 'missing')

    def test_find_operation_by_id(self, service):
        assert service.find_operation_by_id('delete-user').http_method == 'DELETE'
        assert service.find_project_id_for_operation('delete-user') == 'proj-1'

    def test_find_port_by_name(self, service):
        assert service.find_port_by_name('proj-1', 'v1').id == 'port-1'
        assert service.find_port_by_name('proj-1', 'V1') is None

    def test_find_operation_by_name(self, service):
        assert service.find_operation_by_name('proj-1', 'port-1', 'DeleteUser').id == 'delete-user'
        assert service.find_operation_by_name('proj-1', 'port-1', 'deleteuser') is None

    def test_find_operation_by_name_unknown_port(self, service):
        with pytest.raises(LookupError):
            service.find_operation_by_name('proj-1', 'missing', 'DeleteUser')

    def test_find_mock_response(self, service):
        response = service.find_mock_response('proj-1', 'port-1', 'get-user', 'r2')

        assert response.http_status_code == 404

        with pytest.raises(LookupError):
            service.find_mock_response('proj-1', 'port-1', 'get-user', 'missing')


class TestProjectMutation:
    """Test saving projects and creating operations."""

    def test_save_project(self, service):
        saved = service.save_project(Project(name='Orders API'))

        assert saved.created is not None
        assert saved.updated is not None
        assert service.find_project_by_name('orders api') is saved

    def test_save_project_duplicate_name(self, service):
        with pytest.raises(ValueError, match='already taken'):
            service.save_project(Project(name='USERS API'))

    def test_save_project_empty_name(self, service):
        with pytest.raises(ValueError):
            service.save_project(Project(name=''))

    def test_update_project(self, service):
        updated = service.update_project('proj-1', Project(name='Users API v2', description='next'))

        assert updated.name == 'Users API v2'
        assert updated.description == 'next'

    def test_create_operation_defaults(self, service):
        operation = service.create_operation(
            'proj-1', 'port-1',
            Operation(id='new-op', status=OperationStatus.DISABLED,
                      response_strategy=ResponseStrategy.SEQUENCE)
        )

        assert operation.status == OperationStatus.MOCKED
        assert operation.response_strategy == ResponseStrategy.RANDOM
        assert service.find_operation_by_id('new-op') is operation

    def test_create_operation_explicit(self, service):
        operation = service.create_operation(
            'proj-1', 'port-1', Operation(id='new-op'),
            status=OperationStatus.ECHO,
            response_strategy=ResponseStrategy.STATUS_SIMULATION
        )

        assert operation.status == OperationStatus.ECHO
        assert operation.response_strategy == ResponseStrategy.STATUS_SIMULATION

    def test_operation_status_count(self):
        operations = [
            Operation(status=OperationStatus.MOCKED),
            Operation(status=OperationStatus.MOCKED),
            Operation(status=OperationStatus.DISABLED),
        ]

        counts = ProjectService.operation_status_count(operations)

        assert counts[OperationStatus.MOCKED] == 2
        assert counts[OperationStatus.DISABLED] == 1
        assert counts[OperationStatus.ECHO] == 0
        assert set(counts) == set(OperationStatus)

    def test_port_model(self):
        port = Port.from_dict({'name': 'soap-port', 'operations': [{'name': 'GetQuote'}]})

        assert port.id
        assert port.to_dict()['operations'][0]['name'] == 'GetQuote'
