"""Shape of the editable site copy, one document per language."""

from __future__ import annotations

import json
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

Rating = Annotated[StrictInt, Field(ge=1, le=5)]


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid")


class Hero(_Section):
    title: StrictStr
    tagline: StrictStr
    subtitle: StrictStr
    cta: StrictStr


class ModuleItem(_Section):
    title: StrictStr
    content: StrictStr


class Modules(_Section):
    title: StrictStr
    items: list[ModuleItem]


class Plan(_Section):
    title: StrictStr
    price: StrictStr
    features: list[StrictStr]


class Plans(_Section):
    """Closed set of pricing plans; every one is required."""

    light: Plan
    start: Plan
    pro: Plan


PLAN_KEYS: tuple[str, ...] = tuple(Plans.model_fields)


class Pricing(_Section):
    title: StrictStr
    period: StrictStr
    plans: Plans


class Testimonial(_Section):
    name: StrictStr
    role: StrictStr
    content: StrictStr
    rating: Rating


class Testimonials(_Section):
    title: StrictStr
    items: list[Testimonial]


class ContactLabels(_Section):
    title: StrictStr
    name: StrictStr
    email: StrictStr
    phone: StrictStr
    company: StrictStr
    plan: StrictStr
    message: StrictStr


class Footer(_Section):
    copyright: StrictStr


class ContentDocument(_Section):
    """All editable copy of the landing page for a single language."""

    hero: Hero
    modules: Modules
    pricing: Pricing
    testimonials: Testimonials
    contact: ContactLabels
    footer: Footer

    @classmethod
    def from_json(cls, raw: str | bytes) -> "ContentDocument":
        return cls.model_validate_json(raw)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    def to_json(self) -> str:
        """Serialize with a stable layout so saves produce minimal diffs."""

        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2) + "\n"


__all__ = [
    "PLAN_KEYS",
    "ContactLabels",
    "ContentDocument",
    "Footer",
    "Hero",
    "ModuleItem",
    "Modules",
    "Plan",
    "Plans",
    "Pricing",
    "Testimonial",
    "Testimonials",
]
