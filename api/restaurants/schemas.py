"""
Request body fields for restaurant endpoints.

Fields are untyped on purpose: whatever the client sent is forwarded to the
store, and a missing field is forwarded as NULL.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class RestaurantFields(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Any = None
    location: Any = None
    price_range: Any = None
