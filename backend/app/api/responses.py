from fastapi import status
from fastapi.responses import JSONResponse

from app.core.exceptions import ERROR_STATUS
from app.schemas.result import MutationResult


def mutation_response(result: MutationResult, success_status: int = status.HTTP_200_OK) -> JSONResponse:
    """Send a MutationResult as-is, with an HTTP status matching its outcome."""
    if result.success:
        status_code = success_status
    else:
        status_code = ERROR_STATUS.get(result.error, status.HTTP_400_BAD_REQUEST)
    return JSONResponse(status_code=status_code, content=result.model_dump())
