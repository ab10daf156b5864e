"""
Notes API: Health Checker Route
==================================

What:  Liveness endpoint at GET /api/healthchecker.
How:   Answers without touching the document store; a 200 only means the
       process is up and serving requests.
Who:   Called by container health checks and load balancers.
"""

from fastapi import APIRouter

from notes_api.schemas.note import GenericResponse

router = APIRouter(prefix="/api", tags=["Health"])

HEALTH_MESSAGE = "Notes CRUD API with FastAPI and MongoDB"


@router.get(
    "/healthchecker",
    response_model=GenericResponse,
    summary="Service liveness check",
)
async def health_checker() -> GenericResponse:
    return GenericResponse(status="success", message=HEALTH_MESSAGE)
