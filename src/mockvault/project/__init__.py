"""
MockVault Project Module

Domain model, definition loading and lookups for mocked projects.
"""

from .model import (
    Project,
    ProjectType,
    Port,
    Operation,
    OperationStatus,
    ResponseStrategy,
    MockResponse,
    StatusCategory,
    generate_id,
)
from .loader import ProjectLoader
from .service import ProjectService

__all__ = [
    'Project',
    'ProjectType',
    'Port',
    'Operation',
    'OperationStatus',
    'ResponseStrategy',
    'MockResponse',
    'StatusCategory',
    'generate_id',
    'ProjectLoader',
    'ProjectService',
]
