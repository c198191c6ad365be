import re
import unicodedata
from typing import Iterable

def slugify(value: str) -> str:
    ascii_value = (
        unicodedata.normalize("NFKD", " ".join(value.split()).lower())
        .encode("ascii", "ignore")
        .decode("ascii")
    )
    return re.sub(r"[^a-z0-9]+", "-", ascii_value).strip("-")

def generate_unique_slug(name: str, existing: Iterable[str]) -> str:
    """
    Slug for `name` that does not collide with any of `existing`.

    Collisions get a numeric suffix: "asha-rao", "asha-rao-1", "asha-rao-2".
    Returns an empty string when the name has no sluggable characters.
    """
    base = slugify(name)
    if not base:
        return ""
    taken = set(existing)
    slug, counter = base, 1
    while slug in taken:
        slug = f"{base}-{counter}"
        counter += 1
    return slug
