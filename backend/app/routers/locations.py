"""
Location endpoints.
"""

from fastapi import APIRouter, Depends, status

from stockapp.dto import LocationDto
from stockapp.services import LocationService

from ..dependencies import get_location_service
from ..schemas import DeletedResponse, LocationRequest

router = APIRouter(prefix="/locations", tags=["locations"])


@router.get("", response_model=list[LocationDto])
def list_locations(service: LocationService = Depends(get_location_service)):
    return service.list_all()


@router.get("/{location_id}", response_model=LocationDto)
def get_location(location_id: int, service: LocationService = Depends(get_location_service)):
    return service.get(location_id)


@router.post("", response_model=LocationDto, status_code=status.HTTP_201_CREATED)
def create_location(payload: LocationRequest, service: LocationService = Depends(get_location_service)):
    return service.create(payload.name, payload.description)


@router.put("/{location_id}", response_model=LocationDto)
def update_location(
    location_id: int,
    payload: LocationRequest,
    service: LocationService = Depends(get_location_service),
):
    return service.update(location_id, payload.name, payload.description)


@router.delete("/{location_id}", response_model=DeletedResponse)
def delete_location(location_id: int, service: LocationService = Depends(get_location_service)):
    """Delete a location; its products stay, without a location."""
    service.delete(location_id)
    return DeletedResponse(id=location_id)
