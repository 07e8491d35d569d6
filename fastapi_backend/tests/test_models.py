"""
Unit tests for the Company, Job and User entities against the fake executor.
"""

import pytest

from jobly.auth_utils import hash_password, verify_password
from jobly.errors import ConflictError, InvalidCredentialsError, NotFoundError, ValidationFailedError
from jobly.models import Company, Job, User


class TestCompany:
    """Test the company entity"""

    def test_create_without_logo_leaves_it_to_the_database(self, fake_db, sample_company):
        fake_db.queue(None, sample_company)
        details = {k: v for k, v in sample_company.items() if k != "logo_url"}

        company = Company.create(details)

        name, query, params = fake_db.calls[1]
        assert name == "execute_returning"
        assert query == (
            "INSERT INTO companies (handle, name, employees, description) VALUES ($1, $2, $3, $4)"
            " RETURNING handle, name, employees, description, logo_url"
        )
        assert params == ["EARTH", "Planet Earth", 13, "Third rock from the sun"]
        assert company["logo_url"] is None

    def test_create_duplicate_handle(self, fake_db, sample_company):
        fake_db.queue({"handle": "EARTH"})
        with pytest.raises(ConflictError) as exc:
            Company.create(sample_company)
        assert exc.value.status_code == 409
        assert exc.value.detail == "Company 'EARTH' already exists"
        assert [c[0] for c in fake_db.calls] == ["fetch_one"]

    def test_all_without_filters(self, fake_db):
        fake_db.queue([{"handle": "A", "name": "Alpha"}])
        assert Company.all({}) == [{"handle": "A", "name": "Alpha"}]
        assert fake_db.calls[0][1:] == ("SELECT handle, name FROM companies", [])

    def test_all_with_filters(self, fake_db):
        Company.all({"search": "Test", "min_employees": 1, "max_employees": 100})
        _, query, params = fake_db.calls[0]
        assert query == (
            "SELECT handle, name FROM companies WHERE name ILIKE $1 AND employees >= $2 AND employees <= $3"
        )
        assert params == ["%Test%", 1, 100]

    def test_min_larger_than_max_rejected_before_querying(self, fake_db):
        with pytest.raises(ValidationFailedError) as exc:
            Company.all({"min_employees": 10, "max_employees": 1})
        assert exc.value.detail == "Min employees cannot be larger than max employees"
        assert fake_db.calls == []

    def test_get_includes_jobs(self, fake_db, sample_company):
        jobs = [{"id": 1, "title": "CEO", "date_posted": None}]
        fake_db.queue(dict(sample_company), jobs)
        company = Company.get("EARTH")
        assert company["jobs"] == jobs
        assert [c[2] for c in fake_db.calls] == [["EARTH"], ["EARTH"]]

    def test_get_missing(self, fake_db):
        with pytest.raises(NotFoundError) as exc:
            Company.get("NOPE")
        assert exc.value.status_code == 404
        assert exc.value.detail == "Company not found"

    def test_update(self, fake_db, sample_company):
        fake_db.queue({**sample_company, "name": "Earth"})
        company = Company.update("EARTH", {"name": "Earth"})
        assert company["name"] == "Earth"
        assert fake_db.calls[0][1:] == ("UPDATE companies SET name=$1 WHERE handle=$2 RETURNING *", ["Earth", "EARTH"])

    def test_update_missing(self, fake_db):
        with pytest.raises(NotFoundError):
            Company.update("NOPE", {"name": "x"})

    def test_delete(self, fake_db):
        fake_db.queue({"handle": "EARTH"})
        assert Company.delete("EARTH") == "Company deleted"

    def test_delete_missing(self, fake_db):
        with pytest.raises(NotFoundError):
            Company.delete("NOPE")


class TestJob:
    """Test the job entity"""

    def test_create(self, fake_db, sample_job):
        fake_db.queue({"handle": "EARTH"}, sample_job)
        details = {"title": "CEO", "salary": 100.01, "equity": 0.3, "company_handle": "EARTH"}
        assert Job.create(details) == sample_job
        _, query, params = fake_db.calls[1]
        assert query.startswith("INSERT INTO jobs (title, salary, equity, company_handle) VALUES ($1, $2, $3, $4)")
        assert query.endswith("RETURNING id, title, salary, equity, company_handle, date_posted")
        assert params == ["CEO", 100.01, 0.3, "EARTH"]

    def test_create_for_missing_company(self, fake_db):
        details = {"title": "CEO", "salary": 1, "equity": 0.1, "company_handle": "NOPE"}
        with pytest.raises(NotFoundError) as exc:
            Job.create(details)
        assert exc.value.detail == "Company not found"
        assert fake_db.calls == [("fetch_one", "SELECT handle FROM companies WHERE handle=$1", ["NOPE"])]

    def test_all_with_filters(self, fake_db):
        Job.all({"search": "ceo", "min_salary": 50, "min_equity": 0.1})
        _, query, params = fake_db.calls[0]
        assert query == (
            "SELECT title, company_handle FROM jobs WHERE title ILIKE $1 AND salary >= $2 AND equity >= $3"
        )
        assert params == ["%ceo%", 50, 0.1]

    def test_all_with_one_filter_numbers_from_one(self, fake_db):
        Job.all({"min_equity": 0.5})
        assert fake_db.calls[0][1:] == ("SELECT title, company_handle FROM jobs WHERE equity >= $1", [0.5])

    def test_get_missing(self, fake_db):
        with pytest.raises(NotFoundError) as exc:
            Job.get(99999)
        assert exc.value.detail == "Job not found"

    def test_update_and_delete(self, fake_db, sample_job):
        fake_db.queue({**sample_job, "salary": 5.0}, {"id": 1})
        assert Job.update(1, {"salary": 5.0})["salary"] == 5.0
        assert Job.delete(1) == "Job deleted"
        assert fake_db.calls[0][1] == "UPDATE jobs SET salary=$1 WHERE id=$2 RETURNING *"


class TestUser:
    """Test the user entity"""

    def test_create_hashes_password(self, fake_db, sample_user):
        fake_db.queue(None, sample_user)
        details = {**sample_user, "password": "secret"}
        del details["photo_url"]

        user = User.create(details)

        assert user == sample_user
        _, query, params = fake_db.calls[1]
        assert "is_admin" not in query
        assert query.endswith("RETURNING username, first_name, last_name, email, photo_url")
        stored = params[list(details).index("password")]
        assert stored != "secret"
        assert verify_password("secret", stored)
        assert details["password"] == "secret"

    def test_create_taken_username(self, fake_db, sample_user):
        fake_db.queue({"username": "testuser", "email": "other@example.com"})
        with pytest.raises(ConflictError) as exc:
            User.create({**sample_user, "password": "secret"})
        assert exc.value.status_code == 409
        assert exc.value.detail == "Username already registered"
        assert len(fake_db.calls) == 1

    def test_create_taken_email(self, fake_db, sample_user):
        fake_db.queue({"username": "someoneelse", "email": "test@example.com"})
        with pytest.raises(ConflictError) as exc:
            User.create({**sample_user, "password": "secret"})
        assert exc.value.detail == "Email already registered"

    def test_update_rehashes_and_hides_password(self, fake_db, sample_user):
        fake_db.queue({**sample_user, "password": "hash", "is_admin": False})
        user = User.update("testuser", {"password": "newpass"})
        assert user == sample_user
        _, query, params = fake_db.calls[0]
        assert query == "UPDATE users SET password=$1 WHERE username=$2 RETURNING *"
        assert verify_password("newpass", params[0])

    def test_get_missing(self, fake_db):
        with pytest.raises(NotFoundError) as exc:
            User.get("ghost")
        assert exc.value.detail == "User not found"

    def test_authenticate(self, fake_db):
        fake_db.queue({"password": hash_password("secret")})
        assert User.authenticate("testuser", "secret") is None

    def test_authenticate_wrong_password(self, fake_db):
        fake_db.queue({"password": hash_password("secret")})
        with pytest.raises(InvalidCredentialsError) as exc:
            User.authenticate("testuser", "nope")
        assert exc.value.status_code == 400
        assert exc.value.detail == "Invalid username or password."

    def test_authenticate_unknown_user(self, fake_db):
        with pytest.raises(InvalidCredentialsError):
            User.authenticate("ghost", "secret")

    def test_admin_status(self, fake_db):
        fake_db.queue({"is_admin": True})
        assert User.get_admin_status("admin") is True
        with pytest.raises(NotFoundError):
            User.get_admin_status("ghost")

    def test_delete_missing(self, fake_db):
        with pytest.raises(NotFoundError):
            User.delete("ghost")
