# scenery/services/scenery_service.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from scenery.core.models import Scene, SceneryConfig, SceneryData, Variation
from scenery.core.naming import match_variations
from scenery.core.ports import SceneCanvas, Scheduler
from scenery.core.resolver import VariationResolver
from scenery.core.variations import FormInput, VariationStore
from scenery.storage.browser import LocalFileBrowser
from scenery.storage.manager import StorageManager

logger = logging.getLogger(__name__)


class SceneryService:
    """
    Wires the variation core to scene storage and the file browser.
    Keeps a base_dir (where scenes and image files live).
    """

    def __init__(
        self,
        base_dir: Path | None = None,
        *,
        storage: Optional[StorageManager] = None,
        browser: Optional[LocalFileBrowser] = None,
        config: Optional[SceneryConfig] = None,
    ):
        if base_dir is None:
            base_dir = Path.home() / ".scenery_data"
        self.base_dir = Path(base_dir)
        self.config = config or SceneryConfig()
        self.storage = storage or StorageManager(self.base_dir)
        if browser is None:
            browser = (
                LocalFileBrowser.for_images(self.base_dir)
                if self.config.images_only
                else LocalFileBrowser(self.base_dir)
            )
        self.browser = browser

    # --- persisted data ---
    def load_data(self, scene: Scene) -> Optional[SceneryData]:
        raw = self.storage.flags(scene).get(self.config.flag_scope, self.config.flag_key)
        if not raw:
            return None
        return SceneryData.from_dict(raw)

    def clear(self, scene: Scene) -> bool:
        return self.storage.unset_flag(
            scene, self.config.flag_scope, self.config.flag_key
        )

    def update_payload(self, data: SceneryData) -> Dict[str, Any]:
        """Scene update as viewers receive it after a submit."""
        return {
            "img": data.background,
            "flags": {self.config.flag_scope: {self.config.flag_key: data.to_dict()}},
        }

    # --- editing ---
    def open_editor(self, scene: Scene) -> VariationStore:
        store = VariationStore(default_label=self.config.default_label)
        store.hydrate(self.load_data(scene), scene.img)
        return store

    def find_candidates(self, base_path: str) -> List[Variation]:
        """
        List the directory of `base_path` and match its files against it.
        I/O errors propagate.
        """
        base = self.browser.relative(base_path)
        files = self.browser.browse("data", base)
        return match_variations(base, files)

    def add_candidates(
        self, store: VariationStore, candidates: List[Variation]
    ) -> List[Variation]:
        """Append candidates whose file is not in the store yet."""
        added = []
        for c in candidates:
            if store.contains_file(c.file):
                continue
            added.append(store.add_variation(c.name, c.file))
        return added

    def scan(self, store: VariationStore, base_path: Optional[str] = None) -> List[Variation]:
        base = base_path or store.background or ""
        added = self.add_candidates(store, self.find_candidates(base))
        logger.info("scan of %s added %d variations", base, len(added))
        return added

    def submit(
        self,
        scene: Scene,
        store: VariationStore,
        form_input: Optional[FormInput] = None,
        selected_gm_index: Any = 0,
        selected_pl_index: Any = None,
    ) -> SceneryData:
        """
        Validate and persist. The scene image becomes the new background and
        the flag is replaced in full, in one write. ValidationError or a
        failed save leaves the scene untouched.
        """
        data = store.validate_and_build(form_input, selected_gm_index, selected_pl_index)
        self.storage.set_flag(
            scene,
            self.config.flag_scope,
            self.config.flag_key,
            data.to_dict(),
            img=data.background or None,
        )
        logger.info(
            "saved %d variations for scene %s (gm=%s, player=%s)",
            len(data.variations),
            scene.name,
            data.gm_image,
            data.pl_image,
        )
        return data

    # --- viewers ---
    def make_resolver(
        self, canvas: SceneCanvas, scheduler: Optional[Scheduler] = None
    ) -> VariationResolver:
        return VariationResolver(canvas, config=self.config, scheduler=scheduler)

    def start_viewer(
        self, scene: Scene, resolver: VariationResolver, is_privileged: bool
    ) -> Optional[str]:
        return resolver.on_viewer_init(self.load_data(scene), is_privileged)
