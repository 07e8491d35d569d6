import logging
from typing import Any, Dict, List, Mapping

from jobly import db
from jobly.errors import ConflictError, NotFoundError, ValidationFailedError
from jobly.query_helpers import create_values, parse_filters, search_query, sql_for_partial_update

logger = logging.getLogger(__name__)

TABLE = "companies"
COLUMNS = ("handle", "name", "employees", "description", "logo_url")
CREATE_KEYS = COLUMNS
UPDATE_KEYS = ("name", "employees", "description", "logo_url")
FILTER_KEYS = ("search", "min_employees", "max_employees")


class Company:
    """Companies, keyed by their handle."""

    @staticmethod
    def create(details: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Insert a company and return the stored row.

        Columns missing from ``details`` take their database default;
        ``logo_url`` stays NULL when not given.
        """
        existing = db.fetch_one("SELECT handle FROM companies WHERE handle=$1", [details.get("handle")])
        if existing:
            raise ConflictError(f"Company '{existing['handle']}' already exists")

        query = create_values(details, TABLE, COLUMNS)
        company = db.execute_returning(query.text, query.parameters)
        logger.info("Created company %s", company["handle"])
        return company

    @staticmethod
    def all(filters: Mapping[str, Any]) -> List[Dict[str, Any]]:
        """
        List ``{handle, name}`` of companies matching the filters.

        Accepted filters: ``search`` (name substring), ``min_employees``,
        ``max_employees``. With no filters every company is returned.
        """
        min_employees = filters.get("min_employees")
        max_employees = filters.get("max_employees")
        if min_employees is not None and max_employees is not None and min_employees > max_employees:
            raise ValidationFailedError("Min employees cannot be larger than max employees")

        predicates = parse_filters(
            {
                "search_name": filters.get("search"),
                "min_employees": min_employees,
                "max_employees": max_employees,
            },
            COLUMNS,
        )
        query = search_query(predicates, ["handle", "name"], TABLE)
        return db.fetch_all(query.text, query.parameters)

    @staticmethod
    def get(handle: str) -> Dict[str, Any]:
        """Fetch one company along with its jobs."""
        company = db.fetch_one(
            "SELECT handle, name, employees, description, logo_url FROM companies WHERE handle=$1",
            [handle],
        )
        if not company:
            raise NotFoundError("Company")

        # Separate read, not in a transaction with the one above.
        company["jobs"] = db.fetch_all(
            "SELECT id, title, date_posted FROM jobs WHERE company_handle=$1 ORDER BY id",
            [handle],
        )
        return company

    @staticmethod
    def update(handle: str, items: Mapping[str, Any]) -> Dict[str, Any]:
        query = sql_for_partial_update(TABLE, items, "handle", handle)
        company = db.execute_returning(query.text, query.parameters)
        if not company:
            raise NotFoundError("Company")
        logger.info("Updated company %s", handle)
        return company

    @staticmethod
    def delete(handle: str) -> str:
        deleted = db.execute_returning("DELETE FROM companies WHERE handle=$1 RETURNING handle", [handle])
        if not deleted:
            raise NotFoundError("Company")
        logger.info("Deleted company %s", handle)
        return "Company deleted"
