from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class Diagnostic(BaseModel):
    """Data-integrity finding returned next to a result instead of an exception."""

    code: str
    message: str
    record_id: Optional[str] = None
