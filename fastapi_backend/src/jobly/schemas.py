from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, confloat, conint


class APIMessage(BaseModel):
    message: str = Field(..., description="Human readable message")


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, description="Username")
    password: str = Field(..., min_length=1, description="Password")


class TokenResponse(BaseModel):
    token: str = Field(..., description="JWT access token")


# =========================
# Companies
# =========================

class CompanySummary(BaseModel):
    handle: str
    name: str


class CompanyJob(BaseModel):
    id: int
    title: str
    date_posted: Optional[datetime] = None


class Company(BaseModel):
    handle: str
    name: str
    employees: Optional[int] = None
    description: Optional[str] = None
    logo_url: Optional[str] = None
    jobs: Optional[List[CompanyJob]] = None


class CompanyCreate(BaseModel):
    handle: str = Field(..., min_length=1, max_length=25)
    name: str = Field(..., min_length=1)
    employees: Optional[conint(ge=0)] = None
    description: Optional[str] = None
    logo_url: Optional[str] = None


class CompanyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    employees: Optional[conint(ge=0)] = None
    description: Optional[str] = None
    logo_url: Optional[str] = None


class CompanyResponse(BaseModel):
    company: Company


class CompanyListResponse(BaseModel):
    companies: List[CompanySummary]


# =========================
# Jobs
# =========================

class JobSummary(BaseModel):
    title: str
    company_handle: str


class Job(BaseModel):
    id: int
    title: str
    salary: float
    equity: float
    company_handle: str
    date_posted: Optional[datetime] = None


class JobCreate(BaseModel):
    title: str = Field(..., min_length=1)
    salary: confloat(ge=0) = Field(..., description="Yearly salary")
    equity: confloat(ge=0, le=1) = Field(..., description="Equity share between 0 and 1")
    company_handle: str = Field(..., min_length=1)


class JobUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    salary: Optional[confloat(ge=0)] = None
    equity: Optional[confloat(ge=0, le=1)] = None


class JobResponse(BaseModel):
    job: Job


class JobListResponse(BaseModel):
    jobs: List[JobSummary]


# =========================
# Users
# =========================

class UserSummary(BaseModel):
    username: str
    first_name: str
    last_name: str
    email: EmailStr


class User(UserSummary):
    photo_url: Optional[str] = None


class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=25)
    password: str = Field(..., min_length=1)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: EmailStr
    photo_url: Optional[str] = None


class UserUpdate(BaseModel):
    password: Optional[str] = Field(None, min_length=1)
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    photo_url: Optional[str] = None


class UserResponse(BaseModel):
    user: User


class UserCreatedResponse(UserResponse):
    token: str


class UserListResponse(BaseModel):
    users: List[UserSummary]
