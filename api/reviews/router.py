"""
Review API endpoints.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, status

from core import db, params, responses

from . import repository, schemas

logger = logging.getLogger(__name__)

router = APIRouter()


async def review_fields(request: Request) -> schemas.ReviewFields:
    return schemas.ReviewFields.model_validate(await params.read_body(request))


@router.post("/restaurants/{restaurant_id}/addReview", status_code=status.HTTP_201_CREATED)
async def add_review(
    restaurant_id: str,
    fields: schemas.ReviewFields = Depends(review_fields),
    database: db.Database = Depends(db.get_db),
) -> dict:
    # The path id is forwarded untouched; the store rejects non-integers.
    row = await repository.create_review(
        database,
        restaurant_id,
        name=fields.name,
        review=fields.review,
        rating=fields.rating,
    )
    logger.info("review_created restaurant_id=%s", restaurant_id)
    return responses.success({"review": row})
