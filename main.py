#!/usr/bin/env python3
"""
Main entry point for the Bead Pattern Generator.
"""

import sys
import os

# Add src directory to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from beadkit.cli import main as cli_main

if __name__ == '__main__':
    cli_main()
