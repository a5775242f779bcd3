# scenery/storage/manager.py
from __future__ import annotations

import copy
import json
import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional

from scenery.core.models import Scene, new_scene

logger = logging.getLogger(__name__)

# constants
META_FILENAME = "scene.json"
SCENES_DIRNAME = "Scenes"
GLOBAL_META_FILENAME = "global_metadata.json"


def _atomic_write(path: Path, data: str) -> None:
    """
    Atomically write text data to path. Write to temporary then replace.
    """
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(data, encoding="utf-8")
    tmp.replace(path)


def _ensure_dir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_scene_on_disk(base_dir: Path, scene: Scene) -> Path:
    """
    Create the folder of a scene and write its initial metadata.
    Returns the scene root path.
    """
    scene_root = base_dir / scene.name
    if (scene_root / META_FILENAME).exists():
        raise FileExistsError(f"Scene {scene.name} already exists")
    _ensure_dir(scene_root)
    scene.path = str(scene_root)
    scene.created_at = scene.created_at or _now()
    scene.modified_at = scene.modified_at or scene.created_at
    _atomic_write(scene_root / META_FILENAME, scene.to_json())
    return scene_root


def load_scene_from_disk(scene_root: Path) -> Scene:
    meta_path = scene_root / META_FILENAME
    if not meta_path.exists():
        raise FileNotFoundError(f"{meta_path} not found")
    scene = Scene.from_json(meta_path.read_text(encoding="utf-8"))
    scene.path = str(scene_root)
    return scene


def save_scene_to_disk(scene: Scene) -> None:
    if not scene.path:
        raise ValueError("scene.path must be set to save to disk")
    scene_root = Path(scene.path)
    _ensure_dir(scene_root)
    _atomic_write(scene_root / META_FILENAME, scene.to_json())


class SceneFlags:
    """
    Flag storage of one scene, written through to disk on every `set`.
    """

    def __init__(self, manager: "StorageManager", scene: Scene):
        self._mgr = manager
        self.scene = scene

    def get(self, scope: str, key: str) -> Optional[Any]:
        return self._mgr.get_flag(self.scene, scope, key)

    def set(self, scope: str, key: str, data: Any) -> None:
        self._mgr.set_flag(self.scene, scope, key, data)

    def unset(self, scope: str, key: str) -> bool:
        return self._mgr.unset_flag(self.scene, scope, key)


class StorageManager:
    """
    Scenes on disk under <base_dir>/Scenes/<name>/scene.json, plus the
    application-wide global_metadata.json in base_dir.
    """

    def __init__(self, base_dir: Path):
        self.base_dir = Path(base_dir)
        self.scenes_dir = self.base_dir / SCENES_DIRNAME
        _ensure_dir(self.scenes_dir)

    # --- scenes ---
    def create_scene(self, name: str, img: str = "") -> Scene:
        scene = new_scene(name=name, img=img)
        root = create_scene_on_disk(self.scenes_dir, scene)
        logger.info("created scene %s at %s", name, root)
        return load_scene_from_disk(root)

    def load_scene(self, name_or_path: str | Path) -> Scene:
        candidate = self.scenes_dir / str(name_or_path)
        if (candidate / META_FILENAME).exists():
            return load_scene_from_disk(candidate)
        p = Path(name_or_path)
        if (p / META_FILENAME).exists():
            return load_scene_from_disk(p)
        raise FileNotFoundError(
            f"Scene {name_or_path} not found under base dir {self.base_dir}"
        )

    def save_scene(self, scene: Scene) -> None:
        scene.modified_at = _now()
        save_scene_to_disk(scene)

    def delete_scene(self, name: str) -> None:
        p = self.scenes_dir / name
        if not p.exists():
            raise FileNotFoundError(f"{p} not found")
        shutil.rmtree(p)

    def list_scenes(self) -> Iterable[str]:
        for p in sorted(self.scenes_dir.iterdir()):
            if p.is_dir() and (p / META_FILENAME).exists():
                yield p.name

    def _commit(self, scene: Scene, change: Callable[[Scene], Any]) -> Any:
        """
        Apply `change` to a copy of `scene` and save the copy. `scene` takes
        the new state only once the save succeeded.
        """
        draft = Scene.from_dict(copy.deepcopy(scene.to_dict()))
        result = change(draft)
        self.save_scene(draft)
        scene.img = draft.img
        scene.flags = draft.flags
        scene.modified_at = draft.modified_at
        return result

    def update_image(self, scene: Scene, img: str) -> None:
        if scene.img == img:
            return

        def _set_img(draft: Scene) -> None:
            draft.img = img

        self._commit(scene, _set_img)

    # --- flags ---
    def flags(self, scene: Scene) -> SceneFlags:
        return SceneFlags(self, scene)

    def get_flag(self, scene: Scene, scope: str, key: str) -> Optional[Any]:
        return scene.get_flag(scope, key)

    def set_flag(
        self,
        scene: Scene,
        scope: str,
        key: str,
        data: Any,
        *,
        img: Optional[str] = None,
    ) -> None:
        """
        Replace one flag, and the scene image when `img` is given, in a
        single save.
        """

        def _apply(draft: Scene) -> None:
            if img:
                draft.img = img
            draft.set_flag(scope, key, data)

        self._commit(scene, _apply)

    def unset_flag(self, scene: Scene, scope: str, key: str) -> bool:
        if scene.get_flag(scope, key) is None:
            return False
        return self._commit(scene, lambda draft: draft.unset_flag(scope, key))

    # --- global settings ---
    def load_global_metadata(self) -> Dict[str, Any]:
        path = self.base_dir / GLOBAL_META_FILENAME
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("unreadable %s, using defaults", path)
            return {}
        return data if isinstance(data, dict) else {}

    def save_global_metadata(self, metadata: Dict[str, Any]) -> None:
        payload = metadata if isinstance(metadata, dict) else {}
        _atomic_write(
            self.base_dir / GLOBAL_META_FILENAME,
            json.dumps(payload, ensure_ascii=False, indent=2),
        )

    def get_global_language(self, default: str = "en") -> str:
        value = self.load_global_metadata().get("language")
        return str(value) if value else default

    def set_global_language(self, locale: str) -> None:
        meta = self.load_global_metadata()
        meta["language"] = locale
        self.save_global_metadata(meta)
