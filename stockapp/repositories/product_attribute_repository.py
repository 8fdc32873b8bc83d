"""
Product attribute repository.

Attribute search folds case and diacritics in Python, so "IŞIK" finds
"isik" and "Çelik" finds "celik", which a plain SQL LIKE cannot do
portably.
"""

import unicodedata

from sqlalchemy.orm import joinedload

from stockapp.dto import Page, ProductAttributeDto
from stockapp.models import ProductAttribute

from .base import BaseRepository


def fold_text(value: str | None) -> str:
    """Lowercase and strip diacritics."""
    if not value:
        return ""
    decomposed = unicodedata.normalize("NFKD", value.casefold())
    folded = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    # dotless i has no decomposition
    return folded.replace("ı", "i")


def attribute_to_dto(attribute: ProductAttribute) -> ProductAttributeDto:
    return ProductAttributeDto(
        id=attribute.id,
        product_id=attribute.product_id,
        product_name=attribute.product.name if attribute.product else "",
        key=attribute.key,
        value=attribute.value,
        created_at=attribute.created_at,
        updated_at=attribute.updated_at,
    )


class ProductAttributeRepository(BaseRepository[ProductAttribute]):
    model = ProductAttribute

    def _base_query(self):
        return self.session.query(ProductAttribute).options(joinedload(ProductAttribute.product))

    def list_page(
        self,
        page: int = 1,
        page_size: int = 10,
        product_id: int | None = None,
        search_key: str | None = None,
    ) -> Page[ProductAttributeDto]:
        query = self._base_query()
        if product_id is not None:
            query = query.filter(ProductAttribute.product_id == product_id)

        dtos = [attribute_to_dto(a) for a in query.all()]

        if search_key and search_key.strip():
            needle = fold_text(search_key.strip())
            dtos = [
                dto
                for dto in dtos
                if needle in fold_text(dto.key)
                or needle in fold_text(dto.value)
                or needle in fold_text(dto.product_name)
            ]

        dtos.sort(key=lambda dto: (dto.updated_at or dto.created_at, dto.id), reverse=True)

        start = (page - 1) * page_size
        return Page[ProductAttributeDto](
            items=dtos[start:start + page_size],
            total_count=len(dtos),
            page=page,
            page_size=page_size,
        )

    def get_dto(self, attribute_id: int) -> ProductAttributeDto | None:
        attribute = self._base_query().filter(ProductAttribute.id == attribute_id).first()
        return attribute_to_dto(attribute) if attribute else None

    def list_all_dtos(self) -> list[ProductAttributeDto]:
        return [attribute_to_dto(a) for a in self._base_query().order_by(ProductAttribute.id).all()]

    def ids_for_product(self, product_id: int) -> list[int]:
        rows = (
            self.session.query(ProductAttribute.id)
            .filter(ProductAttribute.product_id == product_id)
            .all()
        )
        return [row[0] for row in rows]
