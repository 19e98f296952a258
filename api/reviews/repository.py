"""
Review persistence (raw SQL).
"""

from __future__ import annotations

from typing import Any

from core import db

LIST_REVIEWS_SQL = """
    SELECT *
    FROM reviews
    WHERE restaurant_id = $1
    ORDER BY id
"""

# restaurant_id arrives as raw path text; Postgres does the integer parse.
INSERT_REVIEW_SQL = """
    INSERT INTO reviews (name, review, rating, restaurant_id)
    VALUES ($1::text, $2::text, $3::text::numeric, $4::text::integer)
    RETURNING *
"""


async def list_reviews_for_restaurant(database: db.Database, restaurant_id: int | None) -> list[dict[str, Any]]:
    return await database.fetch_all(LIST_REVIEWS_SQL, restaurant_id)


async def create_review(
    database: db.Database,
    restaurant_id: str,
    *,
    name: Any,
    review: Any,
    rating: Any,
) -> dict[str, Any] | None:
    return await database.fetch_one(
        INSERT_REVIEW_SQL,
        db.to_text_param(name),
        db.to_text_param(review),
        db.to_text_param(rating),
        db.to_text_param(restaurant_id),
    )
