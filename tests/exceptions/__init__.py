"""
Exception handling tests.

Tests for mediaio.exceptions and mediaio._bindings.err_check:
- Error code to Python exception mapping (library tags and errno)
- Fallback for unrecognized codes
- Stashed callback exceptions taking priority over codes
- Last-log attachment

Maps to: mediaio/exceptions/, mediaio/_bindings.py
"""
