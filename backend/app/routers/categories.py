"""
Category endpoints.
"""

from fastapi import APIRouter, Depends, status

from stockapp.dto import CategoryDto
from stockapp.services import CategoryService

from ..dependencies import get_category_service
from ..schemas import CategoryRequest, DeletedResponse

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=list[CategoryDto])
def list_categories(service: CategoryService = Depends(get_category_service)):
    return service.list_all()


@router.get("/{category_id}", response_model=CategoryDto)
def get_category(category_id: int, service: CategoryService = Depends(get_category_service)):
    return service.get(category_id)


@router.post("", response_model=CategoryDto, status_code=status.HTTP_201_CREATED)
def create_category(payload: CategoryRequest, service: CategoryService = Depends(get_category_service)):
    return service.create(payload.name)


@router.put("/{category_id}", response_model=CategoryDto)
def update_category(
    category_id: int,
    payload: CategoryRequest,
    service: CategoryService = Depends(get_category_service),
):
    return service.update(category_id, payload.name)


@router.delete("/{category_id}", response_model=DeletedResponse)
def delete_category(category_id: int, service: CategoryService = Depends(get_category_service)):
    """Delete a category. Categories that still have products are rejected."""
    service.delete(category_id)
    return DeletedResponse(id=category_id)
