"""FastAPI app serving git progress streams and file history."""

from fastapi import FastAPI

from ..core.logging import setup_logging
from .routes import history, push

setup_logging()

app = FastAPI(title="gitprogress", docs_url=None, redoc_url=None)

app.include_router(push.router)
app.include_router(history.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
