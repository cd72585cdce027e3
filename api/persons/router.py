"""
Person API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from . import dependencies, schemas
from .service import PersonService

router = APIRouter(prefix="/api/v1/persons")

_ERRORS = {
    400: {"model": schemas.ErrorResponse},
    500: {"model": schemas.ErrorResponse},
}
_ERRORS_WITH_404 = {**_ERRORS, 404: {"model": schemas.ErrorResponse}}


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.Person,
    response_model_exclude_none=True,
    responses=_ERRORS,
)
async def create_person(
    request: schemas.PersonCreateRequest,
    service: PersonService = Depends(dependencies.get_person_service),
) -> schemas.Person:
    """
    Create a person; age, gender and nationality are filled in from the predictors.
    """
    return await service.create_person(request)


@router.get(
    "",
    response_model=list[schemas.Person],
    response_model_exclude_none=True,
    responses=_ERRORS,
)
async def list_persons(
    paging: tuple[int, int] = Depends(dependencies.pagination),
    filters: dict = Depends(dependencies.person_filters),
    service: PersonService = Depends(dependencies.get_person_service),
) -> list[schemas.Person]:
    page, limit = paging
    return await service.list_persons(page=page, limit=limit, filters=filters)


@router.get(
    "/{person_id}",
    response_model=schemas.Person,
    response_model_exclude_none=True,
    responses=_ERRORS_WITH_404,
)
async def get_person(
    person_id: int = Depends(dependencies.person_id_path),
    service: PersonService = Depends(dependencies.get_person_service),
) -> schemas.Person:
    return await service.get_person(person_id)


@router.put("/{person_id}", response_model=schemas.MessageResponse, responses=_ERRORS_WITH_404)
async def update_person(
    request: schemas.PersonUpdateRequest,
    person_id: int = Depends(dependencies.person_id_path),
    service: PersonService = Depends(dependencies.get_person_service),
) -> schemas.MessageResponse:
    await service.update_person(request.to_person(person_id))
    return schemas.MessageResponse(message="Person updated")


@router.patch("/{person_id}", response_model=schemas.MessageResponse, responses=_ERRORS_WITH_404)
async def patch_person(
    request: schemas.PersonPatchRequest,
    person_id: int = Depends(dependencies.person_id_path),
    service: PersonService = Depends(dependencies.get_person_service),
) -> schemas.MessageResponse:
    """
    Update only the fields present in the body.
    """
    await service.patch_person(person_id, request.changes())
    return schemas.MessageResponse(message="Person patched")


@router.delete("/{person_id}", response_model=schemas.MessageResponse, responses=_ERRORS_WITH_404)
async def delete_person(
    person_id: int = Depends(dependencies.person_id_path),
    service: PersonService = Depends(dependencies.get_person_service),
) -> schemas.MessageResponse:
    await service.delete_person(person_id)
    return schemas.MessageResponse(message="Person deleted")
