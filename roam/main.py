from contextlib import asynccontextmanager

from fastapi import FastAPI
import uvicorn

from roam.api import chat, events
from roam.core.env import load_env
from roam.db.session import init_db
from roam.logging import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    load_env()
    configure_logging()
    init_db()
    yield


app = FastAPI(title="Roam AI", lifespan=lifespan)
app.include_router(chat.router)
app.include_router(events.router)


@app.get("/ping")
async def ping():
    return {"message": "pong"}


if __name__ == "__main__":
    uvicorn.run("roam.main:app", host="0.0.0.0", port=8000, reload=True)
