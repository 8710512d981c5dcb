import logging
import os
import time
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from database import get_session_context, init_db
from routers import auth, dashboard, donations, donors, receipts, webhooks
from services.credential_store import seed_admins
from services.errors import TransientStorageError
from utils.logging import configure_logging

# Load .env
load_dotenv()
configure_logging()

logger = logging.getLogger("temple_donations")


@asynccontextmanager
async def lifespan(app: FastAPI):
     init_db()
     with get_session_context() as db:
          seed_admins(db)
     logger.info("Temple donation API ready")
     yield


# App instance
app = FastAPI(title="Temple Donation Tracker", lifespan=lifespan)

# CORS
origins = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "").split(",") if origin.strip()]
app.add_middleware(
     CORSMiddleware,
     allow_origins=origins,
     allow_credentials=True,
     allow_methods=["*"],
     allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(donations.router)
app.include_router(receipts.router)
app.include_router(dashboard.router)
app.include_router(donors.router)
app.include_router(webhooks.router)


@app.exception_handler(TransientStorageError)
async def storage_error_handler(request: Request, exc: TransientStorageError):
     return JSONResponse(status_code=503, content={"error": "Storage temporarily unavailable"})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
     # Unmatched paths raise the router's bare 404; handlers always give a detail
     if exc.status_code == 404 and exc.detail == "Not Found":
          return JSONResponse(status_code=404, content={"error": "Route not found"})
     return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)


# Request timing and 500 fallback
@app.middleware("http")
async def request_log_middleware(request: Request, call_next):
     started = time.perf_counter()
     try:
          response = await call_next(request)
     except Exception:
          logger.exception("Unhandled error on %s %s", request.method, request.url.path)
          return JSONResponse(status_code=500, content={"error": "Internal server error"})

     if request.url.path.startswith("/api"):
          duration_ms = (time.perf_counter() - started) * 1000
          logger.info(
               "%s %s %s in %.0fms",
               request.method,
               request.url.path,
               response.status_code,
               duration_ms,
               extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": round(duration_ms),
               },
          )
     return response


if __name__ == "__main__":
     port = int(os.getenv("PORT", 10000))
     uvicorn.run("main:app", host="0.0.0.0", port=port, reload=True)
