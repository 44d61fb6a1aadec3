"""Application interfaces."""
from .services import TimesheetAPIService

__all__ = [
    'TimesheetAPIService',
]
