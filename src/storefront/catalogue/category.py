from protean.fields import String, Text

from storefront.catalogue.events import CategoryAdded
from storefront.domain import storefront


@storefront.aggregate
class Category:
    name = String(required=True, max_length=100)
    slug = String(required=True, max_length=120)
    description = Text()

    @classmethod
    def create(cls, name: str, slug: str, description: str | None = None):
        category = cls(name=name, slug=slug, description=description)
        category.raise_(CategoryAdded(category_id=str(category.id), name=name, slug=slug))
        return category
