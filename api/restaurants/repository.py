"""
Restaurant persistence (raw SQL).

Every read joins the restaurant rows to a per-restaurant review summary that
Postgres computes on the spot:
- count: number of reviews (0 when there are none)
- average_rating: AVG(rating) truncated (not rounded) to one decimal,
  NULL when there are no reviews
"""

from __future__ import annotations

from typing import Any

from core import db

_SUMMARY_JOIN = """
    SELECT
      restaurants.*,
      COALESCE(reviews.count, 0)::int AS count,
      reviews.average_rating
    FROM restaurants
    LEFT JOIN (
      SELECT
        restaurant_id,
        COUNT(*) AS count,
        TRUNC(AVG(rating), 1) AS average_rating
      FROM reviews
      GROUP BY restaurant_id
    ) reviews ON restaurants.id = reviews.restaurant_id
"""

LIST_RESTAURANTS_SQL = _SUMMARY_JOIN + """
    ORDER BY restaurants.id
"""

GET_RESTAURANT_SQL = _SUMMARY_JOIN + """
    WHERE restaurants.id = $1
"""

INSERT_RESTAURANT_SQL = """
    INSERT INTO restaurants (name, location, price_range)
    VALUES ($1::text, $2::text, $3::text::integer)
    RETURNING *
"""

UPDATE_RESTAURANT_SQL = """
    UPDATE restaurants
    SET name = $1::text,
        location = $2::text,
        price_range = $3::text::integer
    WHERE id = $4
    RETURNING *
"""

DELETE_RESTAURANT_SQL = """
    DELETE FROM restaurants
    WHERE id = $1
"""


async def list_restaurants(database: db.Database) -> list[dict[str, Any]]:
    return await database.fetch_all(LIST_RESTAURANTS_SQL)


async def get_restaurant(database: db.Database, restaurant_id: int | None) -> dict[str, Any] | None:
    """
    Restaurant row plus summary, or None when the id matches nothing.
    """
    return await database.fetch_one(GET_RESTAURANT_SQL, restaurant_id)


async def create_restaurant(
    database: db.Database,
    *,
    name: Any,
    location: Any,
    price_range: Any,
) -> dict[str, Any] | None:
    return await database.fetch_one(
        INSERT_RESTAURANT_SQL,
        db.to_text_param(name),
        db.to_text_param(location),
        db.to_text_param(price_range),
    )


async def update_restaurant(
    database: db.Database,
    restaurant_id: int | None,
    *,
    name: Any,
    location: Any,
    price_range: Any,
) -> dict[str, Any] | None:
    """
    Overwrite all three fields. Returns None when no row has this id.
    """
    return await database.fetch_one(
        UPDATE_RESTAURANT_SQL,
        db.to_text_param(name),
        db.to_text_param(location),
        db.to_text_param(price_range),
        restaurant_id,
    )


async def delete_restaurant(database: db.Database, restaurant_id: int | None) -> None:
    # Reviews are left in place; nothing cascades here.
    await database.execute(DELETE_RESTAURANT_SQL, restaurant_id)
