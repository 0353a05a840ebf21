"""Canonical taxonomy tables for listings and wardrobe items.

The keyword tables are ordered sequences of ``(pattern, result)`` pairs that
are scanned front to back, so the first matching entry decides the result.
Entry order is therefore part of the behaviour: a later entry is never
reached for a title that already matched an earlier one (a title mentioning
both "jacket" and "sweater" is always outerwear, for example).
"""

from typing import Dict, List, Sequence, Tuple

WARDROBE_CATEGORIES: List[str] = [
    "Tops",
    "Bottoms",
    "Dresses",
    "Outerwear",
    "Shoes",
    "Accessories",
]

DEFAULT_BRAND = "Unknown Brand"
DEFAULT_CATEGORY = "Clothing"
DEFAULT_COLOR = "Unknown"
DEFAULT_MATERIAL = "Mixed Materials"
DEFAULT_DETECTED_CATEGORY = "Accessories"

BRAND_KEYWORDS: Sequence[str] = (
    "Nike",
    "Adidas",
    "Puma",
    "New Balance",
    "Converse",
    "Vans",
    "Uniqlo",
    "Zara",
    "H&M",
    "Mango",
    "Cotton On",
    "Levi's",
    "Levis",
    "Ralph Lauren",
    "Tommy Hilfiger",
    "Calvin Klein",
    "Fred Perry",
    "Lacoste",
    "Champion",
    "Carhartt",
    "The North Face",
    "Patagonia",
    "Dr. Martens",
    "Gucci",
    "Prada",
    "Louis Vuitton",
    "Chanel",
    "Burberry",
    "Coach",
    "Michael Kors",
)

CATEGORY_KEYWORDS: Sequence[Tuple[str, str]] = (
    ("jacket", "Outerwear"),
    ("coat", "Outerwear"),
    ("blazer", "Outerwear"),
    ("cardigan", "Outerwear"),
    ("vest", "Outerwear"),
    ("dress", "Dresses"),
    ("gown", "Dresses"),
    ("jumpsuit", "Dresses"),
    ("sweater", "Tops"),
    ("hoodie", "Tops"),
    ("shirt", "Tops"),
    ("blouse", "Tops"),
    ("tee", "Tops"),
    ("top", "Tops"),
    ("jeans", "Bottoms"),
    ("pants", "Bottoms"),
    ("trousers", "Bottoms"),
    ("shorts", "Bottoms"),
    ("skirt", "Bottoms"),
    ("leggings", "Bottoms"),
    ("sneakers", "Shoes"),
    ("boots", "Shoes"),
    ("heels", "Shoes"),
    ("sandals", "Shoes"),
    ("loafers", "Shoes"),
    ("shoes", "Shoes"),
    ("bag", "Accessories"),
    ("hat", "Accessories"),
    ("cap", "Accessories"),
    ("scarf", "Accessories"),
    ("belt", "Accessories"),
    ("necklace", "Accessories"),
    ("earrings", "Accessories"),
)

COLOR_KEYWORDS: Sequence[str] = (
    "black",
    "white",
    "navy",
    "blue",
    "red",
    "green",
    "yellow",
    "pink",
    "purple",
    "orange",
    "brown",
    "beige",
    "cream",
    "grey",
    "gray",
)

MATERIAL_KEYWORDS: Sequence[str] = (
    "cotton",
    "linen",
    "wool",
    "cashmere",
    "silk",
    "denim",
    "leather",
    "suede",
    "polyester",
    "nylon",
    "rayon",
    "spandex",
)

# Several source colors collapse onto a neighbouring canonical color
# (orange -> Red, purple/violet -> Pink, tan -> Brown, cream -> Beige).
COLOR_NORMALIZATION: Dict[str, str] = {
    "white": "White",
    "black": "Black",
    "gray": "Gray",
    "grey": "Gray",
    "navy": "Navy",
    "blue": "Blue",
    "red": "Red",
    "pink": "Pink",
    "green": "Green",
    "yellow": "Yellow",
    "brown": "Brown",
    "beige": "Beige",
    "cream": "Beige",
    "tan": "Brown",
    "orange": "Red",
    "purple": "Pink",
    "violet": "Pink",
}

DETECTED_TYPE_CATEGORIES: Dict[str, str] = {
    "Shirts": "Tops",
    "T-Shirts": "Tops",
    "Blouses": "Tops",
    "Tank Tops": "Tops",
    "Sweaters": "Tops",
    "Hoodies": "Tops",
    "Top": "Tops",
    "Jeans": "Bottoms",
    "Pants": "Bottoms",
    "Trousers": "Bottoms",
    "Shorts": "Bottoms",
    "Skirts": "Bottoms",
    "Leggings": "Bottoms",
    "Dresses": "Dresses",
    "Gowns": "Dresses",
    "Sundresses": "Dresses",
    "Jackets": "Outerwear",
    "Coats": "Outerwear",
    "Blazers": "Outerwear",
    "Cardigans": "Outerwear",
    "Vests": "Outerwear",
    "Sneakers": "Shoes",
    "Boots": "Shoes",
    "Heels": "Shoes",
    "Flats": "Shoes",
    "Sandals": "Shoes",
    "Loafers": "Shoes",
}


def validate_category(value: str) -> str:
    """Validate a wardrobe category case-insensitively and return its canonical label.

    Raises a :class:`ValueError` if the category is not one of
    :data:`WARDROBE_CATEGORIES`.
    """

    key = value.strip().lower()
    for category in WARDROBE_CATEGORIES:
        if category.lower() == key:
            return category
    raise ValueError(f"Unsupported category '{value}'. Allowed: {WARDROBE_CATEGORIES}")


__all__ = [
    "WARDROBE_CATEGORIES",
    "DEFAULT_BRAND",
    "DEFAULT_CATEGORY",
    "DEFAULT_COLOR",
    "DEFAULT_MATERIAL",
    "DEFAULT_DETECTED_CATEGORY",
    "BRAND_KEYWORDS",
    "CATEGORY_KEYWORDS",
    "COLOR_KEYWORDS",
    "MATERIAL_KEYWORDS",
    "COLOR_NORMALIZATION",
    "DETECTED_TYPE_CATEGORIES",
    "validate_category",
]
