"""Test package for Studio Chat.

Structure:
    - unit/: Session core, configuration and client tests in isolation
    - integration/: API and end-to-end session workflows over HTTP

The remote model is replaced by scripted fakes (tests/fakes.py) except in
tests marked to require an API key.
Leverages pytest with pytest-check for soft assertions.
"""
