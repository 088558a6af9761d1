"""Test utilities for gardensite applications::

    from gardensite.testing import TestClient, assert_security_headers
"""

from gardensite.testing.assertions import assert_json_error, assert_security_headers
from gardensite.testing.client import TestClient

__all__ = [
    "TestClient",
    "assert_json_error",
    "assert_security_headers",
]
