"""
MockVault Project Service

Lookup and creation helpers over the project repository.

Walks the Project -> Port -> Operation -> MockResponse tree held in a
``Repository[Project]``. Everything here is plain composition over the
repository, so the same functions serve REST and SOAP projects.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from ..errors import OperationNotFound
from ..repository import Repository
from .model import (
    MockResponse,
    Operation,
    OperationStatus,
    Port,
    Project,
    ResponseStrategy,
)


class ProjectService:
    """
    Hierarchical access to projects, ports, operations and mock responses.

    Example:
        service = ProjectService(InMemoryRepository())
        project = service.save_project(Project(name="Payments"))
        operation = service.find_operation_by_id(operation_id)
    """

    def __init__(self, repository: Repository[Project]):
        self.repository = repository
        self.logger = logging.getLogger("mockvault.projects")

    def find_all(self) -> List[Project]:
        return self.repository.find_all()

    def find_project(self, project_id: str) -> Project:
        """
        Find a project by id.

        Raises:
            LookupError: If no project has the provided id
        """
        project = self.repository.find_one(project_id)
        if project is None:
            raise LookupError(f"Unable to find a project with id {project_id}")
        return project

    def find_project_by_name(self, name: str) -> Optional[Project]:
        """Find a project by name (case-insensitive). Returns None if absent."""
        if not name:
            raise ValueError("Project name cannot be empty")
        for project in self.repository.find_all():
            if project.name.lower() == name.lower():
                return project
        return None

    def save_project(self, project: Project) -> Project:
        """
        Save a new project.

        Raises:
            ValueError: If the name is empty or already taken
        """
        if not project.name:
            raise ValueError("Invalid project name. Project name cannot be empty")
        if self.find_project_by_name(project.name) is not None:
            raise ValueError("Project name is already taken")
        now = datetime.now(timezone.utc)
        project.created = project.created or now
        project.updated = now
        self.logger.info(f"Saved project {project.name} ({project.id})")
        return self.repository.save(project)

    def update_project(self, project_id: str, updated_project: Project) -> Project:
        """Update name and description of an existing project."""
        if not updated_project.name:
            raise ValueError("Invalid project name. Project name cannot be empty")
        with_name = self.find_project_by_name(updated_project.name)
        if with_name is not None and with_name.id != project_id:
            raise ValueError("Project name is already taken")
        project = self.find_project(project_id)
        project.name = updated_project.name
        project.description = updated_project.description
        project.updated = datetime.now(timezone.utc)
        return self.repository.save(project)

    def import_projects(self, projects: Iterable[Project]) -> List[Project]:
        """Save every project, replacing any stored project with the same id."""
        saved = [self.repository.save(project) for project in projects]
        self.logger.info(f"Imported {len(saved)} projects")
        return saved

    def find_port(self, project_id: str, port_id: str) -> Port:
        project = self.find_project(project_id)
        for port in project.ports:
            if port.id == port_id:
                return port
        raise LookupError(f"Unable to find a port with id {port_id}")

    def find_port_by_name(self, project_id: str, name: str) -> Optional[Port]:
        """Find a port of a project by exact name. Returns None if absent."""
        for port in self.find_project(project_id).ports:
            if port.name == name:
                return port
        return None

    def find_operation_by_name(self, project_id: str, port_id: str, name: str) -> Optional[Operation]:
        """Find an operation of a port by exact name. Returns None if absent."""
        for operation in self.find_port(project_id, port_id).operations:
            if operation.name == name:
                return operation
        return None

    def find_operation(self, project_id: str, port_id: str, operation_id: str) -> Operation:
        port = self.find_port(project_id, port_id)
        for operation in port.operations:
            if operation.id == operation_id:
                return operation
        raise OperationNotFound(operation_id)

    def find_operation_by_id(self, operation_id: str) -> Operation:
        """
        Find an operation anywhere in the stored projects.

        Raises:
            OperationNotFound: If no project contains the operation
        """
        for project in self.repository.find_all():
            for operation in project.operations:
                if operation.id == operation_id:
                    return operation
        raise OperationNotFound(operation_id)

    def find_project_id_for_operation(self, operation_id: str) -> str:
        for project in self.repository.find_all():
            if any(operation.id == operation_id for operation in project.operations):
                return project.id
        raise OperationNotFound(operation_id)

    def find_mock_response(
        self,
        project_id: str,
        port_id: str,
        operation_id: str,
        mock_response_id: str
    ) -> MockResponse:
        operation = self.find_operation(project_id, port_id, operation_id)
        for mock_response in operation.mock_responses:
            if mock_response.id == mock_response_id:
                return mock_response
        raise LookupError(f"Unable to find a mock response with id {mock_response_id}")

    def create_operation(
        self,
        project_id: str,
        port_id: str,
        operation: Operation,
        status: Optional[OperationStatus] = None,
        response_strategy: Optional[ResponseStrategy] = None
    ) -> Operation:
        """
        Attach a new operation to a port.

        Args:
            project_id: Owning project
            port_id: Owning port
            operation: Operation to add
            status: Status to apply (MOCKED when None)
            response_strategy: Strategy to apply (RANDOM when None)

        Returns:
            The stored operation
        """
        project = self.find_project(project_id)
        port = self.find_port(project_id, port_id)
        operation.status = status or OperationStatus.MOCKED
        operation.response_strategy = response_strategy or ResponseStrategy.RANDOM
        port.operations.append(operation)
        project.updated = datetime.now(timezone.utc)
        self.repository.save(project)
        return operation

    @staticmethod
    def operation_status_count(operations: Iterable[Operation]) -> Dict[OperationStatus, int]:
        """Count operations per status; every status is present in the result."""
        statuses = {status: 0 for status in OperationStatus}
        for operation in operations:
            statuses[operation.status] += 1
        return statuses
