"""Opt-in substitution of upstream rejections on attendance routes."""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import FrozenSet, Optional
import json

from domain.value_objects import Coordinate, UpstreamResponse


@dataclass(frozen=True)
class MockFallbackPolicy:
    """
    Status codes for which an upstream rejection of a punch in/out is
    answered with a synthetic success instead of being relayed.

    Empty by default, which means every upstream response is relayed as-is.
    The synthetic body always carries ``"mock": true`` and the upstream status.
    """
    statuses: FrozenSet[int] = frozenset()

    @property
    def enabled(self) -> bool:
        return bool(self.statuses)

    def applies_to(self, attendance: bool, status_code: int) -> bool:
        return attendance and status_code in self.statuses

    def synthetic_response(
        self,
        endpoint_name: str,
        upstream_status: int,
        coordinate: Optional[Coordinate],
        user_id: Optional[str],
    ) -> UpstreamResponse:
        payload = {
            "success": True,
            "mock": True,
            "message": f"{endpoint_name} recorded locally; upstream answered {upstream_status}",
            "upstreamStatus": upstream_status,
            "data": {
                "action": endpoint_name,
                "userId": user_id,
                "location": coordinate.to_dict() if coordinate else None,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        }
        return UpstreamResponse(
            status_code=200,
            body=json.dumps(payload).encode("utf-8"),
            content_type="application/json",
        )
