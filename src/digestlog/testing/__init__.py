"""
Testing utilities for digestlog.

Test doubles and validators are always available. Pytest fixtures live in
``digestlog.testing.fixtures`` and need the testing extra:
``pip install digestlog[testing]``.

Example:
    from digestlog.testing import MemoryTransport, validate_transport

    def test_my_transport():
        result = validate_transport(MyTransport())
        assert result.valid
"""

from .mocks import ImmediateRegistrar, MemoryTransport, RaisingTransport, SentMessage
from .validators import ProtocolViolationError, ValidationResult, validate_transport

__all__ = [
    "ImmediateRegistrar",
    "MemoryTransport",
    "ProtocolViolationError",
    "RaisingTransport",
    "SentMessage",
    "ValidationResult",
    "validate_transport",
]
