"""
Test fixtures for object-dispatch

This package contains class modules used for testing:
- account.py: field shadowing a method, __methods__, raising methods
- broken.py: syntax error
- variadic.py: method the dispatcher refuses
"""

import os

# Path to fixtures directory
FIXTURES_DIR = os.path.dirname(__file__)
CLASSES_DIR = os.path.join(FIXTURES_DIR, 'classes')
