from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis import RedisError

from nogod.api.agent_routes import router as agent_router
from nogod.api.deps import get_credentials
from nogod.api.routes import router
from nogod.core.errors import AccountError
from nogod.observability.logging import log
from nogod.settings import settings
from nogod.store.redis_conn import get_redis


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Misconfiguration or an unreachable store aborts startup.
    get_credentials()
    try:
        get_redis().ping()
    except RedisError as exc:
        log(event="boot_failed", reason="storage_unreachable", error=str(exc))
        raise
    log(event="boot", port=settings.PORT, adminRbac=settings.ADMIN_RBAC_ENABLED)
    yield


app = FastAPI(title="Nogod MFS API", lifespan=lifespan)

origins = [x.strip() for x in settings.CORS_ORIGINS.split(",") if x.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)
app.include_router(agent_router)


@app.get("/")
def root():
    return {"status": "ok", "message": "Nogod is running..."}


@app.get("/health")
def health():
    return {"status": "ok"}


@app.exception_handler(AccountError)
async def account_error_handler(request: Request, exc: AccountError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    fields = sorted({str(e.get("loc", ["", ""])[-1]) for e in exc.errors()})
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request body", "fields": fields},
    )


def run() -> None:
    uvicorn.run("nogod.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
