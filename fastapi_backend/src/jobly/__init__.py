"""
Jobly: job board API (companies, jobs, users) on FastAPI + PostgreSQL.

Modules:
- config: environment configuration
- db: PostgreSQL connection pooling + query helpers
- query_helpers: filter parsing and parameterized SQL builders
- clean_items: whitelist projection of request payloads
- auth_utils: password hashing, JWT issuing and the auth dependencies
- schemas: Pydantic models for the REST API
- models: Company, Job and User entities
"""
