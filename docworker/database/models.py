from dataclasses import dataclass
from datetime import datetime


@dataclass
class Job:
    """Represents a row from the file_jobs table.

    ``attempt`` counts deliveries already used up (failed, or redelivered after
    an expired lock); the first delivery is attempt 0.
    """

    id: int
    file_id: int
    attempt: int
    status: str = "processing"
    error_message: str | None = None
    locked_at: datetime | None = None
    available_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
