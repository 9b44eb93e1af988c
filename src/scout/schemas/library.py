"""A stored site analysis in the local design library."""

import uuid
from datetime import datetime, timezone

from pydantic import Field

from scout.schemas.analysis import UIAnalysis
from scout.schemas.base import ScoutModel


class LibraryEntry(ScoutModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    category: str
    url: str
    analysis: UIAnalysis
    tags: list[str] = []
    created_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
