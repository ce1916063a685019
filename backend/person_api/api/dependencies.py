"""FastAPI dependencies resolving the per-process collaborators built in lifespan."""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from person_api.infrastructure.database import get_db
from person_api.services.external_call_service import ExternalCallService
from person_api.services.person_service import PersonEnrichmentService


def get_external_call_service(request: Request) -> ExternalCallService:
    service = getattr(request.app.state, "external_call_service", None)
    if service is None:
        raise RuntimeError("External call service not initialized")
    return service


def get_person_service(
    db: AsyncSession = Depends(get_db),
    external: ExternalCallService = Depends(get_external_call_service),
) -> PersonEnrichmentService:
    return PersonEnrichmentService(db, external)
