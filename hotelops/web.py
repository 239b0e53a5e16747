"""Request helpers shared by the route modules."""
import json
from typing import Any, Dict

from fastapi import Request

from .ops.errors import ValidationError


def get_state(request: Request):
    """The HotelOpsState attached by the app factory."""
    return request.app.state.hotelops


async def read_json(request: Request) -> Dict[str, Any]:
    """Parse the request body as a JSON object. An empty body reads as {}."""
    raw = await request.body()
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except ValueError:
        raise ValidationError("Request body is not valid JSON")
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data
