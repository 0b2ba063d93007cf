"""
MockVault Operation Router

Resolves inbound REST and SOAP requests to an operation id.

REST operations match on HTTP method and URI template, where a ``{name}``
segment matches any single path segment. SOAP operations match on the
SOAPAction header, falling back to the operation name appearing as an
element name in the envelope.
"""

import re
from functools import lru_cache
from typing import Optional, Pattern

from ..project.model import Operation, Port
from ..project.service import ProjectService


@lru_cache(maxsize=1024)
def compile_uri_template(template: str) -> Pattern:
    """Compile a URI template like /users/{id}/orders into a regex."""
    parts = [p for p in template.strip('/').split('/') if p]
    pattern = ''.join(
        '/[^/]+' if re.fullmatch(r'\{[^/{}]+\}', part) else '/' + re.escape(part)
        for part in parts
    )
    return re.compile(f'^{pattern or "/"}/?$')


def _normalize_path(path: str) -> str:
    path = path.split('?', 1)[0]
    return '/' + path.strip('/')


class OperationRouter:
    """
    Maps requests to operations of a given project and port.

    Example:
        router = OperationRouter(project_service)
        operation_id = router.match_rest(project_id, port_id, 'GET', '/users/42')
    """

    def __init__(self, projects: ProjectService):
        self.projects = projects

    def _port(self, project_id: str, port_id: str) -> Optional[Port]:
        try:
            return self.projects.find_port(project_id, port_id)
        except LookupError:
            return None

    def match_rest(self, project_id: str, port_id: str, method: str, path: str) -> Optional[str]:
        """
        Find the REST operation answering a method and path.

        Literal URIs win over templated ones when both match.

        Returns:
            Operation id, or None if nothing matches
        """
        port = self._port(project_id, port_id)
        if port is None:
            return None

        normalized = _normalize_path(path)
        templated: Optional[Operation] = None
        for operation in port.operations:
            if operation.http_method not in (method.upper(), '*'):
                continue
            if _normalize_path(operation.uri) == normalized:
                return operation.id
            if templated is None and compile_uri_template(operation.uri).match(normalized):
                templated = operation
        return templated.id if templated else None

    def match_soap(
        self,
        project_id: str,
        port_id: str,
        soap_action: Optional[str],
        body: str = ""
    ) -> Optional[str]:
        """
        Find the SOAP operation answering a SOAPAction header or envelope.

        Returns:
            Operation id, or None if nothing matches
        """
        port = self._port(project_id, port_id)
        if port is None:
            return None

        action = (soap_action or '').strip().strip('"')
        if action:
            for operation in port.operations:
                if operation.soap_action == action:
                    return operation.id
            operation = self.projects.find_operation_by_name(project_id, port_id, action)
            if operation is not None:
                return operation.id

        for operation in port.operations:
            if operation.name and re.search(rf'<(?:[\w.-]+:)?{re.escape(operation.name)}[\s/>]', body):
                return operation.id
        return None
