from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core import config, db, observability, responses
from restaurants import router as restaurants_router
from reviews import router as reviews_router

API_PREFIX = "/api/v1"

config.load_env()


@asynccontextmanager
async def lifespan(_: FastAPI):
    observability.setup_logging(config.log_level(), config.log_format())
    # One pool per process; every request shares it.
    await db.init_pool()
    try:
        yield
    finally:
        await db.close_pool()


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins(),
    allow_methods=["*"],
    allow_headers=["*"],
)

responses.register_error_handlers(app)

app.include_router(restaurants_router.router, prefix=API_PREFIX, tags=["restaurants"])
app.include_router(reviews_router.router, prefix=API_PREFIX, tags=["reviews"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "restaurant reviews api"}


if __name__ == "__main__":
    uvicorn.run(app, host=config.listen_host(), port=config.listen_port())
