"""
MockVault Repository Module

Persistence collaborator used by the project and event components.
"""

from .base import Repository, InMemoryRepository

__all__ = [
    'Repository',
    'InMemoryRepository',
]
