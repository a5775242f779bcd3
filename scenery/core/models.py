# scenery/core/models.py
"""
Core data models for Scenery.

A scene carries a default background image plus a list of alternate
"variations". One variation is bound to privileged viewers (GM view) and one
to everyone else (player view). The binding is persisted as a scene flag.

This file contains:
 - Variation, SceneryData (the persisted flag payload)
 - Scene (a scene record with its flags)
 - SceneryConfig (module settings)
 - ValidationError
 - get_property / has_property helpers for update payloads
 - Factory helper new_scene
"""
from __future__ import annotations

import copy
import json
import uuid
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

# flag location used when nothing else is configured
FLAG_SCOPE = "scenery"
FLAG_KEY = "data"
DEFAULT_LABEL = "Default"
# delay of the second redraw after a remote update
REDRAW_DELAY_MS = 60

ROLE_ERROR_MESSAGE = "GM & Player view must have a file"


class ValidationError(ValueError):
    """Raised when a variation set cannot be persisted."""


# -----------------------------------------------------------------------------
# Update payload helpers
# -----------------------------------------------------------------------------
# Scene updates arrive either nested ({"flags": {"scenery": {"data": ...}}})
# or flattened ({"flags.scenery.data": ...}), and sometimes a mix of both.
def _lookup(obj: Any, parts: List[str]) -> Tuple[bool, Any]:
    if not parts:
        return True, obj
    if not isinstance(obj, Mapping):
        return False, None
    # longest dotted key first so "flags.scenery" beats "flags"
    for i in range(len(parts), 0, -1):
        key = ".".join(parts[:i])
        if key in obj:
            found, value = _lookup(obj[key], parts[i:])
            if found:
                return True, value
    return False, None


def has_property(obj: Any, path: str) -> bool:
    found, _ = _lookup(obj, path.split("."))
    return found


def get_property(obj: Any, path: str, default: Any = None) -> Any:
    found, value = _lookup(obj, path.split("."))
    return value if found else default


# -----------------------------------------------------------------------------
# Dataclasses
# -----------------------------------------------------------------------------


@dataclass
class Variation:
    name: str = ""
    file: str = ""

    def is_empty(self) -> bool:
        return not self.file

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Variation":
        return cls(
            name=str(data.get("name") or ""),
            file=str(data.get("file") or ""),
        )

    @classmethod
    def coerce(cls, value: Any) -> "Variation":
        """Accept a Variation, a {name, file} mapping or a (name, file) pair."""
        if isinstance(value, Variation):
            return cls(name=value.name, file=value.file)
        if isinstance(value, Mapping):
            return cls.from_dict(value)
        name, file = value
        return cls(name=str(name or ""), file=str(file or ""))


@dataclass
class SceneryData:
    """
    Persisted payload of the scenery flag.

    Serialized with the keys background / variations / gmImage / plImage.
    The short keys bg / gm / pl written by older versions are still read.
    """

    background: str
    variations: List[Variation] = field(default_factory=list)
    gm_image: str = ""
    pl_image: str = ""

    def image_for(self, is_privileged: bool) -> str:
        return self.gm_image if is_privileged else self.pl_image

    def to_dict(self) -> Dict[str, Any]:
        return {
            "background": self.background,
            "variations": [v.to_dict() for v in self.variations],
            "gmImage": self.gm_image,
            "plImage": self.pl_image,
        }

    def to_json(self, *, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SceneryData":
        background = data.get("background", data.get("bg")) or ""
        return cls(
            background=str(background),
            variations=[
                Variation.from_dict(x)
                for x in (data.get("variations") or [])
                if isinstance(x, Mapping)
            ],
            gm_image=str(data.get("gmImage", data.get("gm")) or ""),
            pl_image=str(data.get("plImage", data.get("pl")) or ""),
        )

    @classmethod
    def from_json(cls, s: str) -> "SceneryData":
        return cls.from_dict(json.loads(s))


@dataclass
class SceneryConfig:
    flag_scope: str = FLAG_SCOPE
    flag_key: str = FLAG_KEY
    redraw_delay_ms: int = REDRAW_DELAY_MS
    default_label: str = DEFAULT_LABEL
    # scan only files Pillow knows how to open
    images_only: bool = True

    @property
    def flag_path(self) -> str:
        return f"flags.{self.flag_scope}.{self.flag_key}"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SceneryConfig":
        return cls(
            flag_scope=str(data.get("flag_scope", FLAG_SCOPE)),
            flag_key=str(data.get("flag_key", FLAG_KEY)),
            redraw_delay_ms=int(data.get("redraw_delay_ms", REDRAW_DELAY_MS)),
            default_label=str(data.get("default_label", DEFAULT_LABEL)),
            images_only=bool(data.get("images_only", True)),
        )


@dataclass
class Scene:
    id: str
    name: str
    img: str = ""
    path: Optional[str] = None
    flags: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    created_at: Optional[str] = None
    modified_at: Optional[str] = None

    def get_flag(self, scope: str, key: str) -> Optional[Any]:
        return self.flags.get(scope, {}).get(key)

    def set_flag(self, scope: str, key: str, value: Any) -> None:
        # full replacement of the stored value, never a merge
        self.flags.setdefault(scope, {})[key] = copy.deepcopy(value)

    def unset_flag(self, scope: str, key: str) -> bool:
        bucket = self.flags.get(scope)
        if not bucket or key not in bucket:
            return False
        del bucket[key]
        if not bucket:
            del self.flags[scope]
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "img": self.img,
            "path": self.path,
            "flags": self.flags,
            "created_at": self.created_at,
            "modified_at": self.modified_at,
        }

    def to_json(self, *, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Scene":
        flags = data.get("flags") or {}
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            img=str(data.get("img") or ""),
            path=data.get("path"),
            flags={
                str(scope): dict(values)
                for scope, values in flags.items()
                if isinstance(values, Mapping)
            },
            created_at=data.get("created_at"),
            modified_at=data.get("modified_at"),
        )

    @classmethod
    def from_json(cls, s: str) -> "Scene":
        return cls.from_dict(json.loads(s))


# -----------------------
# Factory helpers
# -----------------------
def new_scene(name: str, img: str = "", path: Optional[str] = None) -> Scene:
    return Scene(id=str(uuid.uuid4()), name=name, img=img, path=path)
