"""
MockVault Mock Server

FastAPI-based HTTP server serving mocked REST and SOAP projects.

Features:
- REST routing by HTTP method and URI template
- SOAP routing by SOAPAction header or envelope element
- Response strategies (sequence, random, status simulation)
- Forwarding to real backends and echo mode
- Bounded event history with an admin API
- Metrics and logging
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, Optional

import httpx
import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from ..config import MockConfig
from ..project.loader import ProjectLoader
from ..project.model import Project, StatusCategory
from ..project.service import ProjectService
from ..repository import InMemoryRepository
from .results import ExecutionResult, MockRequest, ResultAction
from .router import OperationRouter
from .service import MockExecutionService
from .view import ResponseRepositoryView

STATUS_CATEGORY_HEADER = 'X-MockVault-Status-Category'

# Hop-by-hop headers that must not be copied between connections
HEADERS_TO_SKIP = {'content-length', 'transfer-encoding', 'connection', 'host'}


@dataclass
class MockMetrics:
    """Track mock server metrics."""

    total_requests: int = 0
    responded: int = 0
    forwarded: int = 0
    echoed: int = 0
    unavailable: int = 0
    errors: int = 0
    unmatched_requests: int = 0
    start_time: str = field(default_factory=lambda: datetime.now().isoformat())

    def track(self, result: ExecutionResult):
        """Count a resolved call by its outcome."""
        if result.is_error:
            self.errors += 1
        elif result.action == ResultAction.RESPOND:
            self.responded += 1
        elif result.action == ResultAction.FORWARD:
            self.forwarded += 1
        elif result.action == ResultAction.ECHO:
            self.echoed += 1
        elif result.action == ResultAction.SERVICE_UNAVAILABLE:
            self.unavailable += 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        uptime_seconds = (datetime.now() - datetime.fromisoformat(self.start_time)).total_seconds()
        return {
            'total_requests': self.total_requests,
            'responded': self.responded,
            'forwarded': self.forwarded,
            'echoed': self.echoed,
            'unavailable': self.unavailable,
            'errors': self.errors,
            'unmatched_requests': self.unmatched_requests,
            'uptime_seconds': round(uptime_seconds, 2),
            'start_time': self.start_time
        }


class MockServer:
    """
    FastAPI-based mock server for REST and SOAP projects.

    Mock endpoints:
        /mock/rest/{project_id}/{port_id}/{path}   any HTTP method
        /mock/soap/{project_id}/{port_id}          POST

    Example:
        # Load definitions and start server
        server = MockServer('projects.yaml')
        server.start(host='0.0.0.0', port=8080)

        # With custom config
        config = MockConfig(max_event_count=200, event_scope='operation')
        server = MockServer('projects.yaml', config=config)
        server.start()
    """

    def __init__(
        self,
        projects_file: Optional[str] = None,
        config: Optional[MockConfig] = None,
        projects: Optional[Iterable[Project]] = None,
        execution_service: Optional[MockExecutionService] = None
    ):
        """
        Initialize mock server.

        Args:
            projects_file: Path to a YAML/JSON project definitions file
            config: Optional MockConfig for server behavior
            projects: Projects to serve in addition to the file's
            execution_service: Optional MockExecutionService (created if None)
        """
        self.config = config or MockConfig()
        self.metrics = MockMetrics()

        self.logger = logging.getLogger("mockvault.mock")
        self.logger.setLevel(getattr(logging, self.config.log_level.upper(), logging.INFO))

        self.project_service = ProjectService(InMemoryRepository())
        projects_file = projects_file or self.config.projects_file
        if projects_file:
            loaded = ProjectLoader(projects_file).load()
            self.logger.info(f"Loaded {len(loaded)} projects from {projects_file}")
            self.project_service.import_projects(loaded)
        if projects:
            self.project_service.import_projects(projects)

        self.router = OperationRouter(self.project_service)
        self.execution_service = execution_service or MockExecutionService(
            self.config,
            ResponseRepositoryView(self.project_service)
        )

        self.app = self._create_app()

    @property
    def event_log(self):
        return self.execution_service.event_log

    def _create_app(self) -> FastAPI:
        """Create FastAPI application with routes."""
        app = FastAPI(
            title="MockVault Mock Server",
            description="Mock HTTP server serving REST and SOAP projects",
            version="1.0.0"
        )

        if self.config.admin_enabled:
            self._add_admin_routes(app)

        methods = ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"]

        @app.api_route("/mock/rest/{project_id}/{port_id}/{path:path}", methods=methods)
        @app.api_route("/mock/rest/{project_id}/{port_id}", methods=methods)
        async def mock_rest(request: Request, project_id: str, port_id: str, path: str = ""):
            """Serve a REST operation."""
            operation_id = self.router.match_rest(project_id, port_id, request.method, path)
            return await self._handle_request(request, operation_id)

        @app.post("/mock/soap/{project_id}/{port_id}")
        async def mock_soap(request: Request, project_id: str, port_id: str):
            """Serve a SOAP operation."""
            body = (await request.body()).decode('utf-8', errors='replace')
            operation_id = self.router.match_soap(
                project_id, port_id, request.headers.get('SOAPAction'), body
            )
            return await self._handle_request(request, operation_id)

        return app

    def _add_admin_routes(self, app: FastAPI):
        prefix = self.config.admin_prefix

        @app.get(f"{prefix}/metrics")
        async def get_metrics():
            """Get server metrics."""
            return JSONResponse(content=self.metrics.to_dict())

        @app.post(f"{prefix}/reset")
        async def reset_metrics():
            """Reset metrics."""
            self.metrics = MockMetrics()
            return JSONResponse(content={'status': 'reset'})

        @app.get(f"{prefix}/config")
        async def get_config():
            """Get current configuration."""
            return JSONResponse(content=self.config.to_dict())

        @app.get(f"{prefix}/projects")
        async def list_projects():
            """List served projects."""
            projects = self.project_service.find_all()
            return JSONResponse(content={
                'total': len(projects),
                'projects': [
                    {
                        'id': p.id,
                        'name': p.name,
                        'protocol': p.protocol.value,
                        'operations': len(p.operations)
                    }
                    for p in projects
                ]
            })

        @app.get(f"{prefix}/projects/{{project_id}}")
        async def get_project(project_id: str):
            """Get a full project definition."""
            try:
                project = self.project_service.find_project(project_id)
            except LookupError as e:
                return JSONResponse(content={'error': str(e)}, status_code=404)
            return JSONResponse(content=project.to_dict())

        @app.get(f"{prefix}/operations/status")
        async def get_operation_status_count():
            """Count operations per status across all projects."""
            operations = [o for p in self.project_service.find_all() for o in p.operations]
            counts = ProjectService.operation_status_count(operations)
            return JSONResponse(content={status.value: count for status, count in counts.items()})

        @app.post(f"{prefix}/operations/{{operation_id}}/sequence/reset")
        async def reset_sequence(operation_id: str):
            """Restart the response sequence of an operation."""
            self.execution_service.selector.cursors.reset(operation_id)
            return JSONResponse(content={'status': 'reset', 'operation_id': operation_id})

        @app.get(f"{prefix}/events")
        async def list_events(operation_id: Optional[str] = None):
            """List recorded events, oldest first."""
            events = self.event_log.find_events(operation_id)
            return JSONResponse(content={
                'total': len(events),
                'limit': self.config.max_event_count,
                'scope': self.config.event_scope.value,
                'events': [e.to_dict() for e in events]
            })

        @app.get(f"{prefix}/events/export")
        async def export_events():
            """Export the event history."""
            return JSONResponse(content={
                'session': 'mockvault-events',
                'timestamp': datetime.now().isoformat(),
                'events': [e.to_dict() for e in self.event_log.find_events()]
            })

        @app.get(f"{prefix}/events/{{event_id}}")
        async def get_event(event_id: str):
            """Get a single event."""
            event = self.event_log.find_event(event_id)
            if event is None:
                return JSONResponse(content={'error': f'No event with id {event_id}'}, status_code=404)
            return JSONResponse(content=event.to_dict())

        @app.delete(f"{prefix}/events/{{event_id}}")
        async def delete_event(event_id: str):
            """Delete a single event (idempotent)."""
            self.event_log.delete_event(event_id)
            return JSONResponse(content={'status': 'deleted', 'event_id': event_id})

        @app.delete(f"{prefix}/events")
        async def clear_events(operation_id: Optional[str] = None):
            """Clear recorded events."""
            count = self.event_log.clear(operation_id)
            return JSONResponse(content={'status': 'cleared', 'cleared_count': count})

    async def _handle_request(self, request: Request, operation_id: Optional[str]) -> Response:
        """
        Resolve an inbound request and convert the result to a Response.

        Args:
            request: FastAPI Request object
            operation_id: Operation matched by the router, None if unmatched

        Returns:
            FastAPI Response
        """
        self.metrics.total_requests += 1
        raw_body = await request.body()

        if operation_id is None:
            self.metrics.unmatched_requests += 1
            self.logger.warning(f"No operation matched {request.method} {request.url.path}")
            return JSONResponse(
                content={'error': 'No mocked operation matches the request', 'path': request.url.path},
                status_code=404
            )

        mock_request = MockRequest(
            method=request.method,
            uri=str(request.url),
            headers=dict(request.headers),
            body=raw_body.decode('utf-8', errors='replace'),
            status_category=self._desired_category(request)
        )
        self.logger.debug(f"Incoming: {mock_request.method} {mock_request.uri} -> {operation_id}")

        result = self.execution_service.handle(mock_request, operation_id)
        self.metrics.track(result)

        if result.action == ResultAction.FORWARD:
            return await self._forward(request, raw_body, result.forward_url)
        return self._create_response(result, request, raw_body, operation_id)

    def _desired_category(self, request: Request) -> Optional[StatusCategory]:
        value = request.headers.get(STATUS_CATEGORY_HEADER)
        if not value:
            return None
        try:
            return StatusCategory(value.strip().lower())
        except ValueError:
            self.logger.warning(f"Ignoring unknown status category {value!r}")
            return None

    def _create_response(
        self,
        result: ExecutionResult,
        request: Request,
        raw_body: bytes,
        operation_id: str
    ) -> Response:
        """
        Create FastAPI Response from an execution result.

        Args:
            result: Outcome of the execution service
            request: Inbound request (mirrored by echo results)
            raw_body: Inbound request body
            operation_id: Matched operation

        Returns:
            FastAPI Response object with MockVault debug headers
        """
        debug_headers = {
            'X-MockVault-Operation': operation_id,
            'X-MockVault-Action': result.action.value
        }

        if result.action == ResultAction.ERROR:
            return JSONResponse(
                content={'error': result.error_kind, 'message': result.message},
                status_code=result.status_code,
                headers={**debug_headers, 'X-MockVault-Error': result.error_kind}
            )

        if result.action == ResultAction.SERVICE_UNAVAILABLE:
            return JSONResponse(
                content={'error': 'Service unavailable', 'message': result.message},
                status_code=result.status_code,
                headers=debug_headers
            )

        if result.action == ResultAction.ECHO:
            return Response(
                content=raw_body,
                status_code=result.status_code,
                headers=debug_headers,
                media_type=request.headers.get('content-type', 'text/plain')
            )

        headers = {k: v for k, v in result.headers.items() if k.lower() not in HEADERS_TO_SKIP}
        headers.update(debug_headers)
        headers['X-MockVault-Mock-Response'] = result.mock_response_id

        content_type = next(
            (v for k, v in result.headers.items() if k.lower() == 'content-type'),
            'application/json'
        )
        return Response(
            content=result.body,
            status_code=result.status_code,
            headers=headers,
            media_type=content_type
        )

    async def _forward(self, request: Request, raw_body: bytes, url: Optional[str]) -> Response:
        """Forward the inbound request to a real backend."""
        if not url:
            self.logger.error("Forwarded operation has no forwarded endpoint")
            return JSONResponse(content={'error': 'No forwarded endpoint configured'}, status_code=502)

        headers = {k: v for k, v in request.headers.items() if k.lower() not in HEADERS_TO_SKIP}
        try:
            async with httpx.AsyncClient(timeout=self.config.forward_timeout) as client:
                upstream = await client.request(
                    method=request.method,
                    url=url,
                    params=dict(request.query_params),
                    headers=headers,
                    content=raw_body
                )
        except httpx.HTTPError as e:
            self.logger.error(f"Forwarding to {url} failed: {e}")
            return JSONResponse(
                content={'error': 'Forwarding failed', 'url': url, 'message': str(e)},
                status_code=502
            )

        response_headers = {
            k: v for k, v in upstream.headers.items()
            if k.lower() not in HEADERS_TO_SKIP | {'content-encoding'}
        }
        response_headers['X-MockVault-Forwarded-To'] = url
        return Response(
            content=upstream.content,
            status_code=upstream.status_code,
            headers=response_headers
        )

    def start(self, host: Optional[str] = None, port: Optional[int] = None, access_log: bool = True):
        """
        Start the mock server.

        Args:
            host: Host to bind to (overrides config)
            port: Port to bind to (overrides config)
            access_log: Enable access logging
        """
        actual_host = host or self.config.host
        actual_port = port or self.config.port
        projects = self.project_service.find_all()

        print("MockVault Mock Server starting...")
        print(f"   Host: {actual_host}:{actual_port}")
        print(f"   Projects loaded: {len(projects)}")
        print(f"   Event history: {self.config.max_event_count} per {self.config.event_scope.value} scope")
        if self.config.admin_enabled:
            print(f"   Admin API: http://{actual_host}:{actual_port}{self.config.admin_prefix}/metrics")
        print()

        uvicorn.run(
            self.app,
            host=actual_host,
            port=actual_port,
            log_level=self.config.log_level,
            access_log=access_log
        )

    def get_app(self) -> FastAPI:
        """Get the FastAPI app instance for testing or custom deployment."""
        return self.app


def create_mock_server(
    projects_file: str,
    host: str = "127.0.0.1",
    port: int = 8080,
    max_event_count: int = 1000,
    event_scope: str = "global",
    log_level: str = "info",
    admin_enabled: bool = True
) -> MockServer:
    """
    Convenience function to create and configure a mock server.

    Returns:
        Configured MockServer instance
    """
    config = MockConfig(
        host=host,
        port=port,
        max_event_count=max_event_count,
        event_scope=event_scope,
        log_level=log_level,
        admin_enabled=admin_enabled
    )
    return MockServer(projects_file, config=config)
