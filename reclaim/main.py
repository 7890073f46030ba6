import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from .core.database import engine, Base
from .core.config import settings
from .core.errors import ReclaimError
from .models import otp, user, user_session  # noqa: F401  (register tables)
from .routers.auth import router as auth_router
from .routers.otp import router as otp_router
from .routers.session import router as session_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME)

# Configure CORS
raw_origins = settings.CORS_ORIGINS or "*"
origins = [o.strip() for o in raw_origins.split(",") if o.strip()] if isinstance(raw_origins, str) else raw_origins
allow_credentials = False if "*" in origins else True
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create tables
Base.metadata.create_all(bind=engine)


# Error responses are always {"error": message}

FIELD_LABELS = {
    "email": "Email",
    "otp": "OTP",
    "newPassword": "New password",
    "password": "Password",
    "name": "Name",
}

# Whole-body problems; model-level checks carry their own message
BODY_ERROR_TYPES = {"missing", "json_invalid", "json_type", "model_type", "model_attributes_type", "dict_type"}


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    err = errors[0]
    loc = err.get("loc", ())
    if err.get("type") in ("missing", "string_type") and len(loc) > 1:
        field = str(loc[-1])
        return f"{FIELD_LABELS.get(field, field.capitalize())} is required"
    if err.get("type") in BODY_ERROR_TYPES:
        return "Invalid request body"
    return err.get("msg", "Invalid request")


@app.exception_handler(ReclaimError)
async def reclaim_error_handler(request: Request, exc: ReclaimError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": _validation_message(exc)})


# Routers
app.include_router(auth_router)
app.include_router(otp_router)
app.include_router(session_router)

@app.get("/")
def root():
    return {"status": "ok"}

@app.get("/health")
def health():
    return {"status": "healthy"}
