"""Taxonomy registry: the hierarchical catalog of span categories.

Category ids are dot-separated paths: a parent (``camera``) or an attribute
under it (``camera.movement``). The registry is built once from a static
definition and is read-only afterwards; pipeline components receive it by
reference instead of looking it up globally.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from ..errors import TaxonomyError
from ..types import parent_role

TAXONOMY_VERSION = "3.0.0"

DEFAULT_FALLBACK_ROLE = "subject"

# parent id -> display label, description, group, color, {attribute id: label}
TAXONOMY_DEFINITION: dict[str, dict[str, Any]] = {
    "shot": {
        "label": "Shot Type",
        "description": "Framing and vantage of the camera",
        "group": "technical",
        "color": "teal",
        "attributes": {
            "shot.type": "Shot Type / Framing",
        },
    },
    "subject": {
        "label": "Subject & Character",
        "description": "The focal point of the shot",
        "group": "entity",
        "color": "orange",
        "attributes": {
            "subject.identity": "Identity",
            "subject.appearance": "Appearance",
            "subject.wardrobe": "Wardrobe",
            "subject.emotion": "Emotion",
        },
    },
    "action": {
        "label": "Action & Motion",
        "description": "What the subject is doing (one continuous action)",
        "group": "entity",
        "color": "red",
        "attributes": {
            "action.movement": "Movement",
            "action.state": "Pose / State",
            "action.gesture": "Gesture",
        },
    },
    "environment": {
        "label": "Environment",
        "description": "Where the scene takes place",
        "group": "setting",
        "color": "green",
        "attributes": {
            "environment.location": "Location",
            "environment.weather": "Weather",
            "environment.context": "Context",
        },
    },
    "lighting": {
        "label": "Lighting",
        "description": "Illumination and atmosphere",
        "group": "setting",
        "color": "yellow",
        "attributes": {
            "lighting.source": "Light Source",
            "lighting.quality": "Light Quality",
            "lighting.timeOfDay": "Time of Day",
            "lighting.colorTemp": "Color Temperature",
        },
    },
    "camera": {
        "label": "Camera",
        "description": "Cinematography and framing",
        "group": "technical",
        "color": "blue",
        "attributes": {
            "camera.movement": "Camera Movement",
            "camera.lens": "Lens",
            "camera.angle": "Camera Angle",
            "camera.focus": "Focus / Aperture",
        },
    },
    "style": {
        "label": "Style & Aesthetic",
        "description": "Visual treatment and medium",
        "group": "technical",
        "color": "purple",
        "attributes": {
            "style.aesthetic": "Aesthetic",
            "style.filmStock": "Film Stock",
            "style.colorGrade": "Color Grade",
        },
    },
    "technical": {
        "label": "Technical Specs",
        "description": "Video technical parameters",
        "group": "technical",
        "color": "gray",
        "attributes": {
            "technical.aspectRatio": "Aspect Ratio",
            "technical.frameRate": "Frame Rate",
            "technical.resolution": "Resolution",
            "technical.duration": "Duration",
        },
    },
    "audio": {
        "label": "Audio",
        "description": "Sound and music elements",
        "group": "technical",
        "color": "indigo",
        "attributes": {
            "audio.score": "Score",
            "audio.soundEffect": "Sound Effect",
            "audio.ambient": "Ambient Sound",
        },
    },
}

# Flat ids from older prompt templates. Registered ids are never remapped.
LEGACY_ALIASES: dict[str, str] = {
    "identity": "subject.identity",
    "appearance": "subject.appearance",
    "wardrobe": "subject.wardrobe",
    "emotion": "subject.emotion",
    "subject.action": "action.movement",
    "location": "environment.location",
    "weather": "environment.weather",
    "context": "environment.context",
    "lighting_source": "lighting.source",
    "lightingSource": "lighting.source",
    "lighting_quality": "lighting.quality",
    "lightingQuality": "lighting.quality",
    "time_of_day": "lighting.timeOfDay",
    "timeOfDay": "lighting.timeOfDay",
    "timeofday": "lighting.timeOfDay",
    "colorTemp": "lighting.colorTemp",
    "color_temp": "lighting.colorTemp",
    "framing": "shot.type",
    "camera.framing": "shot.type",
    "camera_move": "camera.movement",
    "cameraMove": "camera.movement",
    "movement": "camera.movement",
    "lens": "camera.lens",
    "angle": "camera.angle",
    "focus": "camera.focus",
    "aperture": "camera.focus",
    "depth_of_field": "camera.focus",
    "aesthetic": "style.aesthetic",
    "film_stock": "style.filmStock",
    "filmStock": "style.filmStock",
    "colorGrade": "style.colorGrade",
    "color_grade": "style.colorGrade",
    "aspect_ratio": "technical.aspectRatio",
    "aspectRatio": "technical.aspectRatio",
    "frame_rate": "technical.frameRate",
    "frameRate": "technical.frameRate",
    "fps": "technical.frameRate",
    "resolution": "technical.resolution",
    "specs": "technical.resolution",
    "duration": "technical.duration",
    "score": "audio.score",
    "sound_effect": "audio.soundEffect",
    "soundEffect": "audio.soundEffect",
    "sfx": "audio.soundEffect",
    "ambient": "audio.ambient",
    "ambience": "audio.ambient",
}


@dataclass(frozen=True)
class Category:
    id: str
    label: str
    parent_id: str | None = None
    description: str = ""
    group: str | None = None
    color: str | None = None
    attribute_ids: tuple[str, ...] = ()

    @property
    def is_attribute(self) -> bool:
        return self.parent_id is not None


class TaxonomyRegistry:
    """Read-only lookup over a taxonomy definition."""

    def __init__(
        self,
        categories: Mapping[str, Category],
        aliases: Mapping[str, str] | None = None,
        fallback_role: str = DEFAULT_FALLBACK_ROLE,
        version: str = TAXONOMY_VERSION,
    ) -> None:
        self._categories = MappingProxyType(dict(categories))
        self._check_hierarchy()

        alias_table = {k: v for k, v in (aliases or {}).items() if k not in self._categories}
        for alias, target in alias_table.items():
            if target not in self._categories:
                raise TaxonomyError(f"Alias {alias!r} points at unknown category {target!r}")
        self._aliases = MappingProxyType(alias_table)

        if fallback_role not in self._categories:
            raise TaxonomyError(f"Fallback role {fallback_role!r} is not a registered category")
        self.fallback_role = fallback_role
        self.version = version
        self._parents = tuple(c.id for c in self._categories.values() if not c.is_attribute)
        self._attributes = tuple(
            attr for pid in self._parents for attr in self._categories[pid].attribute_ids
        )

    def _check_hierarchy(self) -> None:
        for cid, category in self._categories.items():
            if cid != category.id:
                raise TaxonomyError(f"Category key {cid!r} does not match id {category.id!r}")
            if category.parent_id is None:
                if "." in cid:
                    raise TaxonomyError(f"Parent category {cid!r} must not contain a dot")
                for attr in category.attribute_ids:
                    child = self._categories.get(attr)
                    if child is None or child.parent_id != cid:
                        raise TaxonomyError(f"Attribute {attr!r} is not registered under {cid!r}")
                continue
            if category.parent_id not in self._categories:
                raise TaxonomyError(f"Attribute {cid!r} has unknown parent {category.parent_id!r}")
            if not cid.startswith(category.parent_id + "."):
                raise TaxonomyError(f"Attribute {cid!r} is not namespaced under {category.parent_id!r}")

    @classmethod
    def from_definition(
        cls,
        definition: Mapping[str, Mapping[str, Any]],
        aliases: Mapping[str, str] | None = None,
        fallback_role: str = DEFAULT_FALLBACK_ROLE,
        version: str = TAXONOMY_VERSION,
    ) -> TaxonomyRegistry:
        """Build a registry from ``{parent: {label, attributes: {id: label}, ...}}``."""
        categories: dict[str, Category] = {}
        for parent_id, entry in definition.items():
            if parent_id in categories:
                raise TaxonomyError(f"Duplicate category id {parent_id!r}")
            attributes = dict(entry.get("attributes") or {})
            categories[parent_id] = Category(
                id=parent_id,
                label=str(entry.get("label", parent_id)),
                description=str(entry.get("description", "")),
                group=entry.get("group"),
                color=entry.get("color"),
                attribute_ids=tuple(attributes),
            )
            for attr_id, attr_label in attributes.items():
                if attr_id in categories or attr_id in definition:
                    raise TaxonomyError(f"Duplicate category id {attr_id!r}")
                categories[attr_id] = Category(
                    id=attr_id,
                    label=str(attr_label),
                    parent_id=parent_id,
                    group=entry.get("group"),
                    color=entry.get("color"),
                )
        return cls(categories, aliases=aliases, fallback_role=fallback_role, version=version)

    @classmethod
    def from_json(cls, path: str | Path) -> TaxonomyRegistry:
        """Load ``{"version", "fallback_role", "aliases", "categories"}`` from JSON."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(data, dict) or not isinstance(data.get("categories"), dict):
            raise TaxonomyError(f"{path}: expected an object with a 'categories' mapping")
        return cls.from_definition(
            data["categories"],
            aliases=data.get("aliases"),
            fallback_role=data.get("fallback_role", DEFAULT_FALLBACK_ROLE),
            version=str(data.get("version", TAXONOMY_VERSION)),
        )

    def __contains__(self, category_id: object) -> bool:
        return category_id in self._categories

    def __len__(self) -> int:
        return len(self._categories)

    def get(self, category_id: str | None) -> Category | None:
        if not category_id:
            return None
        return self._categories.get(self.resolve(category_id))

    def is_valid(self, category_id: str | None) -> bool:
        return bool(category_id) and category_id in self._categories

    def resolve(self, category_id: str | None) -> str:
        """Canonical id for *category_id*, mapping legacy aliases."""
        if not category_id:
            return ""
        return self._aliases.get(category_id, category_id)

    def parent_of(self, category_id: str | None) -> str | None:
        if not category_id:
            return None
        return parent_role(self.resolve(category_id))

    def is_attribute(self, category_id: str | None) -> bool:
        resolved = self.resolve(category_id)
        return bool(resolved) and "." in resolved

    def ancestors(self, category_id: str) -> tuple[str, ...]:
        """Proper ancestors, nearest first (``a.b.c`` -> ``a.b``, ``a``)."""
        parts = self.resolve(category_id).split(".")
        return tuple(".".join(parts[:i]) for i in range(len(parts) - 1, 0, -1))

    def attributes_for(self, parent_id: str | None) -> tuple[str, ...]:
        category = self._categories.get(parent_id or "")
        if category is None or category.is_attribute:
            return ()
        return category.attribute_ids

    def parents(self) -> tuple[str, ...]:
        return self._parents

    def attributes(self) -> tuple[str, ...]:
        return self._attributes

    def label_for(self, category_id: str | None) -> str | None:
        category = self.get(category_id)
        return category.label if category else None

    def group_for(self, category_id: str | None) -> str | None:
        category = self._categories.get(self.parent_of(category_id) or "")
        return category.group if category else None

    def color_for(self, category_id: str | None) -> str | None:
        category = self._categories.get(self.parent_of(category_id) or "")
        return category.color if category else None


def load_default_taxonomy() -> TaxonomyRegistry:
    """Build the built-in video prompt taxonomy. Call once at startup."""
    return TaxonomyRegistry.from_definition(TAXONOMY_DEFINITION, aliases=LEGACY_ALIASES)
