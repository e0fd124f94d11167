"""Public health endpoints.

``/health`` reports row counts for the dashboard status badge and answers
200 even when the database is down (status "degraded"). ``/health/ready``
is for load balancers and fails with 503 until the database answers.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from api.models.api_models import HealthResponse
from api.services.health_service import HealthService
from postboard.db.engine import get_session_dependency

router = APIRouter(prefix="/health", tags=["health"])


def get_health_service(session: Session = Depends(get_session_dependency)) -> HealthService:
    return HealthService(session)


@router.get("", response_model=HealthResponse)
def health(service: HealthService = Depends(get_health_service)):
    return service.get_status()


@router.get("/ready")
def ready(service: HealthService = Depends(get_health_service)) -> dict:
    if not service.check_database():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database unavailable",
        )
    return {"status": "ok", "database": True}
