"""Site categories the analyzer knows how to specialise for."""

CATEGORY_DESCRIPTIONS: dict[str, str] = {
    "saas-landing": "Value prop, pricing, free trial CTA, social proof",
    "healthcare": "Trust, accessibility, calming design, compliance",
    "ecommerce": "Product display, cart flow, trust signals, urgency",
    "portfolio": "Work showcase, case studies, personal brand",
    "startup": "Problem/solution clarity, traction signals, waitlist",
    "agency": "Capability demonstration, process, case studies",
}

CATEGORIES: tuple[str, ...] = tuple(CATEGORY_DESCRIPTIONS)

DEFAULT_CATEGORY = "saas-landing"


def category_label(category_id: str) -> str:
    """``"saas-landing"`` -> ``"Saas Landing"``."""
    return " ".join(word.capitalize() for word in category_id.split("-"))


def list_categories() -> list[dict[str, str]]:
    return [
        {
            "id": key,
            "label": category_label(key),
            "description": CATEGORY_DESCRIPTIONS[key],
        }
        for key in CATEGORIES
    ]
