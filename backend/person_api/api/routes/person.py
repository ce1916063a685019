"""Person Routes: create an enriched person and read it back.

Invariants:
    - POST /person returns 200 with the stored record on success
    - Any external Failure maps to 400 with a generic message (ExternalServiceError)
    - Null fields are omitted from responses
"""

import logging

from fastapi import APIRouter, Depends

from person_api.api.dependencies import get_person_service
from person_api.schemas.person import AddPersonRequest, PersonResponse
from person_api.services.person_service import PersonEnrichmentService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/person", tags=["person"])


@router.post(
    "", response_model=PersonResponse, response_model_exclude_none=True,
)
async def add_person(
    body: AddPersonRequest,
    service: PersonEnrichmentService = Depends(get_person_service),
):
    """Enrich the person through the external service and store it."""
    person = await service.add_person(body)
    return PersonResponse.model_validate(person)


@router.get(
    "/{person_id}", response_model=PersonResponse, response_model_exclude_none=True,
)
async def get_person(
    person_id: int,
    service: PersonEnrichmentService = Depends(get_person_service),
):
    person = await service.get_person(person_id)
    return PersonResponse.model_validate(person)
