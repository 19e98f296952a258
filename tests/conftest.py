"""Shared fixtures: in-memory store + FastAPI test client.

The fake pool stands in for asyncpg's pool behind `core.db.Database`. It
answers the exact statements the repositories send and mimics what Postgres
does with them (text casts, NOT NULL / CHECK / foreign key rejections, the
truncated average), so route tests run without a database.
"""

from __future__ import annotations

from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from core import db
from main import app
from restaurants import repository as restaurant_repository
from reviews import repository as review_repository

INT4_MAX = 2**31 - 1


class FakeStoreError(Exception):
    pass


def _id_param(value: Any) -> int | None:
    # asyncpg encodes an int4 parameter: int or None, within range.
    if value is None:
        return None
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"invalid input for query argument: {value!r} (an integer is required)")
    if abs(value) > INT4_MAX:
        raise OverflowError("value out of int32 range")
    return value


def _text_param(value: Any) -> str | None:
    if value is not None and not isinstance(value, str):
        raise TypeError(f"invalid input for query argument: {value!r} (expected str)")
    return value


def _to_integer(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError as exc:
        raise FakeStoreError(f'invalid input syntax for type integer: "{value}"') from exc


def _to_numeric(value: str | None) -> Decimal | None:
    if value is None:
        return None
    try:
        return Decimal(value.strip())
    except InvalidOperation as exc:
        raise FakeStoreError(f'invalid input syntax for type numeric: "{value}"') from exc


def _not_null(column: str, value: Any) -> Any:
    if value is None:
        raise FakeStoreError(f'null value in column "{column}" violates not-null constraint')
    return value


def _in_range(column: str, value: Decimal | int) -> None:
    if not 1 <= value <= 5:
        raise FakeStoreError(f'new row violates check constraint on "{column}"')


class FakePool:
    """Just enough of `asyncpg.Pool` for `core.db.Database`."""

    def __init__(self) -> None:
        self.restaurants: dict[int, dict[str, Any]] = {}
        self.reviews: dict[int, dict[str, Any]] = {}
        self.statements: list[str] = []
        self.broken = False
        self._next_restaurant_id = 1
        self._next_review_id = 1

    # seeding helpers (bypass the SQL surface)

    def add_restaurant(self, name: str, location: str, price_range: int) -> int:
        restaurant_id = self._next_restaurant_id
        self._next_restaurant_id += 1
        self.restaurants[restaurant_id] = {
            "id": restaurant_id,
            "name": name,
            "location": location,
            "price_range": price_range,
        }
        return restaurant_id

    def add_review(self, restaurant_id: int, name: str, review: str, rating: int | str) -> int:
        review_id = self._next_review_id
        self._next_review_id += 1
        self.reviews[review_id] = {
            "id": review_id,
            "name": name,
            "review": review,
            "rating": Decimal(str(rating)),
            "restaurant_id": restaurant_id,
        }
        return review_id

    # asyncpg surface

    async def fetch(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        self._enter(sql)
        if sql == restaurant_repository.LIST_RESTAURANTS_SQL:
            return [self._with_summary(row) for _, row in sorted(self.restaurants.items())]
        if sql == review_repository.LIST_REVIEWS_SQL:
            restaurant_id = _id_param(args[0])
            return [
                dict(row)
                for _, row in sorted(self.reviews.items())
                if restaurant_id is not None and row["restaurant_id"] == restaurant_id
            ]
        raise AssertionError(f"unexpected statement: {sql}")

    async def fetchrow(self, sql: str, *args: Any) -> dict[str, Any] | None:
        self._enter(sql)
        if sql == restaurant_repository.GET_RESTAURANT_SQL:
            row = self.restaurants.get(_id_param(args[0]))
            return self._with_summary(row) if row is not None else None
        if sql == restaurant_repository.INSERT_RESTAURANT_SQL:
            return self._insert_restaurant(*args)
        if sql == restaurant_repository.UPDATE_RESTAURANT_SQL:
            return self._update_restaurant(*args)
        if sql == review_repository.INSERT_REVIEW_SQL:
            return self._insert_review(*args)
        raise AssertionError(f"unexpected statement: {sql}")

    async def execute(self, sql: str, *args: Any) -> str:
        self._enter(sql)
        if sql == restaurant_repository.DELETE_RESTAURANT_SQL:
            restaurant_id = _id_param(args[0])
            if restaurant_id not in self.restaurants:
                return "DELETE 0"
            if any(r["restaurant_id"] == restaurant_id for r in self.reviews.values()):
                raise FakeStoreError('update or delete on table "restaurants" violates foreign key constraint')
            del self.restaurants[restaurant_id]
            return "DELETE 1"
        raise AssertionError(f"unexpected statement: {sql}")

    # internals

    def _enter(self, sql: str) -> None:
        if self.broken:
            raise ConnectionResetError("connection was closed in the middle of operation")
        self.statements.append(sql)

    def _with_summary(self, row: dict[str, Any]) -> dict[str, Any]:
        ratings = [r["rating"] for r in self.reviews.values() if r["restaurant_id"] == row["id"]]
        average = None
        if ratings:
            mean = sum(ratings, Decimal(0)) / len(ratings)
            average = mean.quantize(Decimal("0.1"), rounding=ROUND_DOWN)
        return {**row, "count": len(ratings), "average_rating": average}

    def _restaurant_values(self, name: Any, location: Any, price_range: Any) -> dict[str, Any]:
        name = _not_null("name", _text_param(name))
        location = _not_null("location", _text_param(location))
        price = _not_null("price_range", _to_integer(_text_param(price_range)))
        _in_range("price_range", price)
        return {"name": name, "location": location, "price_range": price}

    def _insert_restaurant(self, name: Any, location: Any, price_range: Any) -> dict[str, Any]:
        values = self._restaurant_values(name, location, price_range)
        restaurant_id = self.add_restaurant(**values)
        return dict(self.restaurants[restaurant_id])

    def _update_restaurant(self, name: Any, location: Any, price_range: Any, restaurant_id: Any) -> dict[str, Any] | None:
        # Casts fail up front; row constraints only apply to rows that match.
        _to_integer(_text_param(price_range))
        row = self.restaurants.get(_id_param(restaurant_id))
        if row is None:
            return None
        row.update(self._restaurant_values(name, location, price_range))
        return dict(row)

    def _insert_review(self, name: Any, review: Any, rating: Any, restaurant_id: Any) -> dict[str, Any]:
        name = _not_null("name", _text_param(name))
        review = _not_null("review", _text_param(review))
        rating_value = _not_null("rating", _to_numeric(_text_param(rating)))
        _in_range("rating", rating_value)
        target = _not_null("restaurant_id", _to_integer(_text_param(restaurant_id)))
        if target not in self.restaurants:
            raise FakeStoreError('insert on table "reviews" violates foreign key constraint')
        review_id = self.add_review(target, name, review, str(rating_value))
        return dict(self.reviews[review_id])


@pytest.fixture
def store() -> FakePool:
    return FakePool()


@pytest.fixture
async def client(store):
    """Test client with the store dependency pointed at the fake pool."""

    async def override_get_db() -> db.Database:
        return db.Database(store)

    app.dependency_overrides[db.get_db] = override_get_db
    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as c:
        yield c
    app.dependency_overrides.clear()
