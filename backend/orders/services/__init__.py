"""
Orders services package.

- OrderPayloadService: Cart lines to the canonical order document
- OrderSubmissionService: Checkout validation and submission to the order backend
"""

# Normalization
from .payload_service import OrderPayloadService

# Submission
from .submission_service import OrderSubmissionService

__all__ = [
    'OrderPayloadService',
    'OrderSubmissionService',
]
