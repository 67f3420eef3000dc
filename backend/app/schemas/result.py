from typing import Optional
from pydantic import BaseModel


class MutationResult(BaseModel):
    """Outcome of a create/update/delete. Failures never leave partial writes behind."""
    success: bool
    message: str
    id: Optional[int] = None
    error: Optional[str] = None
