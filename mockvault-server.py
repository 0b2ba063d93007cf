#!/usr/bin/env python3
"""
MockVault - Mock server for REST and SOAP APIs

This is a convenience wrapper that calls the packaged implementation.
The actual implementation is in src/mockvault/cli.py

Usage:
    python mockvault-server.py serve projects.example.yaml --port 8080

For more information, run: python mockvault-server.py --help
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent / "src"))

from mockvault.cli import main

if __name__ == '__main__':
    main()
