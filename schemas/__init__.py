from .category import CategoryCreate, CategoryPatch

__all__ = ["CategoryCreate", "CategoryPatch"]
