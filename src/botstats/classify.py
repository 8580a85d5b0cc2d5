"""Weapon style classification from free-text weapon columns."""

from botstats.models import WeaponCategory

GENERAL_CATEGORIES = [
    WeaponCategory.HORIZONTAL,
    WeaponCategory.VERTICAL,
    WeaponCategory.OVERHEAD,
    WeaponCategory.CONTROL,
    WeaponCategory.OTHER,
]

# Checked top to bottom; the first rule with a keyword in the text wins.
# "bar" is listed under both horizontal and vertical, so it always lands
# on horizontal.
CATEGORY_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    (WeaponCategory.OVERHEAD, ("hammer", "axe", "overhead")),
    (WeaponCategory.CONTROL, (
        "lifter", "clamp", "grab", "grabber", "control",
        "flipper", "wedge", "pincer", "fork",
    )),
    (WeaponCategory.HORIZONTAL, (
        "horizontal", "undercutter", "shell", "full body", "ring", "bar",
    )),
    (WeaponCategory.VERTICAL, ("vertical", "drum", "eggbeater", "beater", "bar")),
)

FLAMETHROWER_KEYWORDS = ("flame", "flamethrow", "flame thrower", "torch")


def classify_text(text: str) -> str:
    """Map combined weapon text to one of GENERAL_CATEGORIES."""
    text = (text or "").lower()
    if not text.strip():
        return WeaponCategory.OTHER
    for category, keywords in CATEGORY_RULES:
        if any(k in text for k in keywords):
            return category
    return WeaponCategory.OTHER


def classify_weapon(weapon_type: str, weapon_specific: str) -> str:
    return classify_text(f"{weapon_type or ''} {weapon_specific or ''}")


def is_flamethrower(weapon_specific_normalized: str) -> bool:
    return any(k in (weapon_specific_normalized or "") for k in FLAMETHROWER_KEYWORDS)
