"""
Change Impact Package.

Rule-based engine that predicts the schedule impact of a proposed change to
ERP training materials, plus the FastAPI service around it.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, database, and dependencies
    - models: Pydantic schemas and enums
    - services: Analyzer, classifier, taxonomy, records, enhancement, store
"""

__version__ = "1.0.0"
