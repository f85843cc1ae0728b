"""Test utilities for rest_pipeline applications::

    from rest_pipeline.testing import TestClient
"""

from rest_pipeline.testing.client import TestClient

__all__ = ["TestClient"]
