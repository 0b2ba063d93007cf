"""
MockVault Mock Module

Mock-response resolution engine and its HTTP transport.

This module provides:
- Response selection strategies (sequence, random, status simulation)
- Mock execution service recording every call as an event
- REST/SOAP operation routing
- FastAPI-based mock server with admin API
"""

from .results import ExecutionResult, MockRequest, ResultAction
from .cursor import SequenceCursors
from .view import ResponseRepositoryView, ordered_responses, sequence_slot
from .selector import ResponseSelector
from .service import MockExecutionService
from .router import OperationRouter
from .server import MockServer, MockMetrics, create_mock_server

__all__ = [
    # Results
    'ExecutionResult',
    'MockRequest',
    'ResultAction',

    # Engine
    'SequenceCursors',
    'ResponseRepositoryView',
    'ordered_responses',
    'sequence_slot',
    'ResponseSelector',
    'MockExecutionService',

    # Transport
    'OperationRouter',
    'MockServer',
    'MockMetrics',
    'create_mock_server',
]
