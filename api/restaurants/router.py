"""
Restaurant API endpoints.

Ids that do not parse as integers, or that match no row, are not errors:
the response is a success envelope with an empty payload.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response, status

from core import db, params, responses
from reviews import repository as review_repository

from . import repository, schemas

logger = logging.getLogger(__name__)

router = APIRouter()


async def restaurant_fields(request: Request) -> schemas.RestaurantFields:
    return schemas.RestaurantFields.model_validate(await params.read_body(request))


@router.get("/restaurants")
async def list_restaurants(database: db.Database = Depends(db.get_db)) -> dict:
    rows = await repository.list_restaurants(database)
    logger.debug("restaurants_listed count=%s", len(rows))
    return responses.success({"restaurants": rows}, results=len(rows))


@router.get("/restaurants/{restaurant_id}")
async def get_restaurant(
    restaurant_id: str,
    database: db.Database = Depends(db.get_db),
) -> dict:
    """
    Restaurant with its review summary, plus the raw reviews.

    Two separate reads; a review written in between can make the summary
    and the list disagree for this one response.
    """
    parsed_id = params.parse_int(restaurant_id)
    restaurant = await repository.get_restaurant(database, parsed_id)
    reviews = await review_repository.list_reviews_for_restaurant(database, parsed_id)
    return responses.success({"restaurant": restaurant, "reviews": reviews})


@router.post("/restaurants", status_code=status.HTTP_201_CREATED)
async def create_restaurant(
    fields: schemas.RestaurantFields = Depends(restaurant_fields),
    database: db.Database = Depends(db.get_db),
) -> dict:
    row = await repository.create_restaurant(
        database,
        name=fields.name,
        location=fields.location,
        price_range=fields.price_range,
    )
    logger.info("restaurant_created id=%s", row["id"] if row else None)
    return responses.success({"restaurant": row})


@router.put("/restaurants/{restaurant_id}")
async def update_restaurant(
    restaurant_id: str,
    fields: schemas.RestaurantFields = Depends(restaurant_fields),
    database: db.Database = Depends(db.get_db),
) -> dict:
    row = await repository.update_restaurant(
        database,
        params.parse_int(restaurant_id),
        name=fields.name,
        location=fields.location,
        price_range=fields.price_range,
    )
    return responses.success({"restaurant": row})


@router.delete(
    "/restaurants/{restaurant_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def delete_restaurant(
    restaurant_id: str,
    database: db.Database = Depends(db.get_db),
) -> Response:
    await repository.delete_restaurant(database, params.parse_int(restaurant_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
