import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import psycopg2
import psycopg2.errors
from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from jobly import config, db
from jobly.auth_utils import Identity, create_access_token, ensure_admin, ensure_correct_user, ensure_logged_in
from jobly.clean_items import clean_items
from jobly.errors import ValidationFailedError
from jobly.models import Company, Job, User
from jobly.models import company as company_model
from jobly.models import job as job_model
from jobly.models import user as user_model
from jobly.schemas import (
    APIMessage,
    CompanyCreate,
    CompanyListResponse,
    CompanyResponse,
    CompanyUpdate,
    JobCreate,
    JobListResponse,
    JobResponse,
    JobUpdate,
    LoginRequest,
    TokenResponse,
    UserCreate,
    UserCreatedResponse,
    UserListResponse,
    UserResponse,
    UserUpdate,
)

logging.basicConfig(
    level=config.log_level(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "Health", "description": "Service health checks."},
    {"name": "Auth", "description": "Login and token issuing."},
    {"name": "Companies", "description": "Company listing, search and admin CRUD."},
    {"name": "Jobs", "description": "Job listing, search and admin CRUD."},
    {"name": "Users", "description": "Registration and user profiles."},
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting up Jobly API...")
    db.init_db_pool()
    yield
    logger.info("Shutting down Jobly API...")
    db.close_db_pool()


app = FastAPI(
    title="Jobly API",
    description=(
        "Job board API: companies, jobs and users.\n\n"
        "Auth: send the token from `POST /auth/login` as `_token` in the JSON body or query string, "
        "or as an `Authorization: Bearer <token>` header."
    ),
    version="1.0.0",
    openapi_tags=openapi_tags,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_allow_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render errors as ``{status, message}``."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": exc.status_code, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Schema failures are a 400 with one message per offending field."""
    messages = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ())[1:])
        messages.append(f"{field}: {err.get('msg')}" if field else str(err.get("msg")))
    return JSONResponse(status_code=400, content={"status": 400, "message": messages})


@app.exception_handler(psycopg2.IntegrityError)
async def integrity_error_handler(request: Request, exc: psycopg2.IntegrityError) -> JSONResponse:
    """Constraint violations that slipped past the entity checks, e.g. concurrent inserts."""
    if isinstance(exc, psycopg2.errors.UniqueViolation):
        code, message = 409, "Record conflicts with an existing one"
    elif isinstance(exc, psycopg2.errors.ForeignKeyViolation):
        code, message = 400, "Referenced record does not exist"
    else:
        code, message = 400, "Record violates a database constraint"
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=code, content={"status": code, "message": message})


def _require_changes(changes: Dict[str, Any]) -> Dict[str, Any]:
    if not changes:
        raise ValidationFailedError(["No fields to update"])
    return changes


@app.get("/", tags=["Health"], summary="Health check")
def health_check() -> Dict[str, str]:
    """Health check endpoint."""
    return {"message": "Healthy"}


# =========================
# Auth
# =========================

@app.post("/auth/login", response_model=TokenResponse, tags=["Auth"], summary="Login")
def login(payload: LoginRequest) -> TokenResponse:
    """Check credentials and return a signed token."""
    User.authenticate(payload.username, payload.password)
    is_admin = User.get_admin_status(payload.username)
    logger.info("User %s logged in", payload.username)
    return TokenResponse(token=create_access_token(payload.username, is_admin))


# =========================
# Companies
# =========================

@app.get("/companies", response_model=CompanyListResponse, tags=["Companies"], summary="List companies")
def list_companies(
    search: Optional[str] = Query(None, description="Substring of the company name"),
    min_employees: Optional[int] = Query(None, ge=0),
    max_employees: Optional[int] = Query(None, ge=0),
    _: Identity = Depends(ensure_logged_in),
) -> Dict[str, Any]:
    """List companies, optionally filtered by name and headcount."""
    filters = clean_items(
        {"search": search, "min_employees": min_employees, "max_employees": max_employees},
        company_model.FILTER_KEYS,
    )
    return {"companies": Company.all(filters)}


@app.get(
    "/companies/{handle}",
    response_model=CompanyResponse,
    response_model_exclude_unset=True,
    tags=["Companies"],
    summary="Get company",
)
def get_company(handle: str, _: Identity = Depends(ensure_logged_in)) -> Dict[str, Any]:
    """Get a company and its jobs."""
    return {"company": Company.get(handle)}


@app.post(
    "/companies",
    response_model=CompanyResponse,
    response_model_exclude_unset=True,
    tags=["Companies"],
    summary="Create company",
)
def create_company(payload: CompanyCreate, _: Identity = Depends(ensure_admin)) -> Dict[str, Any]:
    """Admin: create a company."""
    details = clean_items(payload.model_dump(), company_model.CREATE_KEYS)
    return {"company": Company.create(details)}


@app.patch(
    "/companies/{handle}",
    response_model=CompanyResponse,
    response_model_exclude_unset=True,
    tags=["Companies"],
    summary="Update company",
)
def update_company(handle: str, payload: CompanyUpdate, _: Identity = Depends(ensure_admin)) -> Dict[str, Any]:
    """Admin: update some fields of a company."""
    changes = _require_changes(clean_items(payload.model_dump(exclude_unset=True), company_model.UPDATE_KEYS))
    return {"company": Company.update(handle, changes)}


@app.delete("/companies/{handle}", response_model=APIMessage, tags=["Companies"], summary="Delete company")
def delete_company(handle: str, _: Identity = Depends(ensure_admin)) -> APIMessage:
    """Admin: delete a company."""
    return APIMessage(message=Company.delete(handle))


# =========================
# Jobs
# =========================

@app.get("/jobs", response_model=JobListResponse, tags=["Jobs"], summary="List jobs")
def list_jobs(
    search: Optional[str] = Query(None, description="Substring of the job title"),
    min_salary: Optional[float] = Query(None, ge=0),
    min_equity: Optional[float] = Query(None, ge=0, le=1),
    _: Identity = Depends(ensure_logged_in),
) -> Dict[str, Any]:
    """List jobs, optionally filtered by title, salary and equity."""
    filters = clean_items(
        {"search": search, "min_salary": min_salary, "min_equity": min_equity},
        job_model.FILTER_KEYS,
    )
    return {"jobs": Job.all(filters)}


@app.get("/jobs/{job_id}", response_model=JobResponse, tags=["Jobs"], summary="Get job")
def get_job(job_id: int, _: Identity = Depends(ensure_logged_in)) -> Dict[str, Any]:
    return {"job": Job.get(job_id)}


@app.post("/jobs", response_model=JobResponse, tags=["Jobs"], summary="Create job")
def create_job(payload: JobCreate, _: Identity = Depends(ensure_admin)) -> Dict[str, Any]:
    """Admin: post a job for an existing company."""
    details = clean_items(payload.model_dump(), job_model.CREATE_KEYS)
    return {"job": Job.create(details)}


@app.patch("/jobs/{job_id}", response_model=JobResponse, tags=["Jobs"], summary="Update job")
def update_job(job_id: int, payload: JobUpdate, _: Identity = Depends(ensure_admin)) -> Dict[str, Any]:
    """Admin: update title, salary or equity of a job."""
    changes = _require_changes(clean_items(payload.model_dump(exclude_unset=True), job_model.UPDATE_KEYS))
    return {"job": Job.update(job_id, changes)}


@app.delete("/jobs/{job_id}", response_model=APIMessage, tags=["Jobs"], summary="Delete job")
def delete_job(job_id: int, _: Identity = Depends(ensure_admin)) -> APIMessage:
    return APIMessage(message=Job.delete(job_id))


# =========================
# Users
# =========================

@app.get("/users", response_model=UserListResponse, tags=["Users"], summary="List users")
def list_users() -> Dict[str, Any]:
    return {"users": User.all()}


@app.get("/users/{username}", response_model=UserResponse, tags=["Users"], summary="Get user")
def get_user(username: str) -> Dict[str, Any]:
    return {"user": User.get(username)}


@app.post("/users", response_model=UserCreatedResponse, tags=["Users"], summary="Register")
def create_user(payload: UserCreate) -> Dict[str, Any]:
    """Register a new (non-admin) user and return a token for them."""
    details = clean_items(payload.model_dump(), user_model.CREATE_KEYS)
    user = User.create(details)
    return {"user": user, "token": create_access_token(user["username"], False)}


@app.patch("/users/{username}", response_model=UserResponse, tags=["Users"], summary="Update user")
def update_user(username: str, payload: UserUpdate, _: Identity = Depends(ensure_correct_user)) -> Dict[str, Any]:
    """Update your own profile (or any profile, as an admin)."""
    changes = _require_changes(clean_items(payload.model_dump(exclude_unset=True), user_model.UPDATE_KEYS))
    return {"user": User.update(username, changes)}


@app.delete("/users/{username}", response_model=APIMessage, tags=["Users"], summary="Delete user")
def delete_user(username: str, _: Identity = Depends(ensure_correct_user)) -> APIMessage:
    return APIMessage(message=User.delete(username))


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("jobly.main:app", host="0.0.0.0", port=config.port(), log_level=config.log_level().lower())
