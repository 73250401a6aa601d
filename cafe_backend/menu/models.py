from __future__ import annotations

from pydantic import BaseModel, Field


class Size(BaseModel):
    name: str
    price_modifier: float = 0.0
    available: bool = True


class Flavor(BaseModel):
    name: str
    price: float = 0.0
    available: bool = True


class Topping(BaseModel):
    name: str
    price: float = 0.0
    available: bool = True
    character: str | None = None


class MenuItem(BaseModel):
    id: str
    name: str
    description: str = ""
    price: float = 0.0
    category: str = ""
    sub_category: str = ""
    images: list[str] = Field(default_factory=list)
    featured: bool = False
    available: bool = True
    allergens: list[str] = Field(default_factory=list)
    sizes: list[Size] = Field(default_factory=list)
    flavors: list[Flavor] = Field(default_factory=list)
    toppings: list[Topping] = Field(default_factory=list)
    character: str | None = None
    story: str | None = None
    odoo_product_id: int | None = None
    odoo_template_id: int | None = None
    odoo_default_code: str | None = None
    odoo_category_id: int | None = None


class SubCategory(BaseModel):
    id: str
    name: str
    description: str = ""
    items: list[MenuItem] = Field(default_factory=list)


class MenuCategory(BaseModel):
    id: str
    name: str
    description: str = ""
    icon: str = "coffee"
    coming_soon: bool = False
    sub_categories: list[SubCategory] = Field(default_factory=list)


class PackageOffer(BaseModel):
    name: str
    description: str
    discount: float


class RecommendedItem(BaseModel):
    item_id: str
    reason: str
    package_offer: PackageOffer | None = None
