"""External service implementations."""
from .timesheet_api_client import TimesheetAPIClient

__all__ = [
    'TimesheetAPIClient',
]
