"""
Pydantic base models for response envelopes.

Every success response carries success=true; failures are rendered by the
exception handlers in app.main with success=false.
"""

from pydantic import BaseModel


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int
