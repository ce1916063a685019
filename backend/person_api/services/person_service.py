"""Person Enrichment: one external lookup, one database write.

Invariants:
    - A person is persisted only when the external lookup succeeded
    - Any Failure surfaces as ExternalServiceError (400) with the generic failure message
    - Store failures propagate unchanged (DatabaseError -> 503 via session manager)
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from person_api.core.errors import (
    ErrorContext, ExternalServiceError, ResourceNotFoundError,
)
from person_api.core.external_result import Failure
from person_api.models.person import Person
from person_api.schemas.external import GenderizeResult
from person_api.schemas.person import AddPersonRequest
from person_api.services.external_call_service import ExternalCallService

logger = logging.getLogger(__name__)

LOOKUP_OPERATION = "get_by_name"


class PersonEnrichmentService:
    def __init__(self, db: AsyncSession, external: ExternalCallService):
        self._db = db
        self._external = external

    async def add_person(self, request: AddPersonRequest) -> Person:
        """Look up the first name externally, then store the enriched person."""
        result = await self._external.call(
            LOOKUP_OPERATION, {"name": request.name}, GenderizeResult,
        )
        if isinstance(result, Failure):
            raise ExternalServiceError(
                result.message,
                result.reason.value,
                context=ErrorContext(operation=LOOKUP_OPERATION),
            )

        person = Person(
            count=result.data.count,
            name=request.name,
            last_name=request.last_name,
            gender=result.data.gender,
            probability=result.data.probability,
        )
        self._db.add(person)
        await self._db.commit()
        await self._db.refresh(person)
        logger.info(f"Stored person {person.id}")
        return person

    async def get_person(self, person_id: int) -> Person:
        person = await self._db.get(Person, person_id)
        if person is None:
            raise ResourceNotFoundError("Person", str(person_id))
        return person
