import logging
from typing import Any, Dict, List, Mapping

from jobly import db
from jobly.errors import NotFoundError
from jobly.query_helpers import create_values, parse_filters, search_query, sql_for_partial_update

logger = logging.getLogger(__name__)

TABLE = "jobs"
COLUMNS = ("id", "title", "salary", "equity", "company_handle", "date_posted")
CREATE_KEYS = ("title", "salary", "equity", "company_handle")
UPDATE_KEYS = ("title", "salary", "equity")
FILTER_KEYS = ("search", "min_salary", "min_equity")


class Job:
    """Job postings, keyed by a serial id."""

    @staticmethod
    def create(details: Mapping[str, Any]) -> Dict[str, Any]:
        """Insert a job; its company must already exist."""
        company = db.fetch_one("SELECT handle FROM companies WHERE handle=$1", [details.get("company_handle")])
        if not company:
            raise NotFoundError("Company")

        query = create_values(details, TABLE, COLUMNS)
        job = db.execute_returning(query.text, query.parameters)
        logger.info("Created job %s for %s", job["id"], job["company_handle"])
        return job

    @staticmethod
    def all(filters: Mapping[str, Any]) -> List[Dict[str, Any]]:
        """
        List ``{title, company_handle}`` of jobs matching the filters.

        Accepted filters: ``search`` (title substring), ``min_salary``,
        ``min_equity``.
        """
        predicates = parse_filters(
            {
                "search_title": filters.get("search"),
                "min_salary": filters.get("min_salary"),
                "min_equity": filters.get("min_equity"),
            },
            COLUMNS,
        )
        query = search_query(predicates, ["title", "company_handle"], TABLE)
        return db.fetch_all(query.text, query.parameters)

    @staticmethod
    def get(job_id: int) -> Dict[str, Any]:
        job = db.fetch_one(
            "SELECT id, title, salary, equity, company_handle, date_posted FROM jobs WHERE id=$1",
            [job_id],
        )
        if not job:
            raise NotFoundError("Job")
        return job

    @staticmethod
    def update(job_id: int, items: Mapping[str, Any]) -> Dict[str, Any]:
        query = sql_for_partial_update(TABLE, items, "id", job_id)
        job = db.execute_returning(query.text, query.parameters)
        if not job:
            raise NotFoundError("Job")
        logger.info("Updated job %s", job_id)
        return job

    @staticmethod
    def delete(job_id: int) -> str:
        deleted = db.execute_returning("DELETE FROM jobs WHERE id=$1 RETURNING id", [job_id])
        if not deleted:
            raise NotFoundError("Job")
        logger.info("Deleted job %s", job_id)
        return "Job deleted"
