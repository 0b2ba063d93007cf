"""
MockVault

Mock server for REST and SOAP APIs with configurable response strategies
and a bounded event history.
"""

__version__ = '1.0.0'
