"""
Request body fields for review endpoints.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class ReviewFields(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Any = None
    review: Any = None
    rating: Any = None
