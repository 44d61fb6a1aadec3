"""Application use cases."""
from .forward_request import ForwardRequest
from .verify_location import VerifyLocation, read_coordinate

__all__ = [
    'ForwardRequest',
    'VerifyLocation',
    'read_coordinate',
]
