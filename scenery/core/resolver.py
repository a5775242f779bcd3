# scenery/core/resolver.py
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Mapping, Optional, Union

from scenery.core.models import SceneryConfig, SceneryData, get_property
from scenery.core.ports import SceneCanvas, Scheduler

logger = logging.getLogger(__name__)

StoredData = Optional[Union[SceneryData, Mapping[str, Any]]]


class ResolverState(str, Enum):
    UNINITIALIZED = "uninitialized"
    RESOLVED = "resolved"


def resolve(data: StoredData, is_privileged: bool) -> Optional[str]:
    """
    Image the viewer should see, or None when the scene has no configuration
    (the scene's own image stays in effect).
    """
    if not data:
        return None
    if not isinstance(data, SceneryData):
        data = SceneryData.from_dict(data)
    return data.image_for(is_privileged) or None


class VariationResolver:
    """
    Applies the resolved image of one viewer session to a SceneCanvas.

    Nothing is cached between events: every call resolves from the data it is
    given, so the session can always just resolve again.

    A remote update draws twice: once immediately and once after
    `config.redraw_delay_ms` through `scheduler`, because the first draw can
    race with the host's own render pass. Without a scheduler only the
    immediate draw happens.
    """

    def __init__(
        self,
        canvas: SceneCanvas,
        *,
        config: Optional[SceneryConfig] = None,
        scheduler: Optional[Scheduler] = None,
    ):
        self.canvas = canvas
        self.config = config or SceneryConfig()
        self.scheduler = scheduler
        self.state = ResolverState.UNINITIALIZED
        self.active_image: Optional[str] = None

    def on_viewer_init(self, persisted: StoredData, is_privileged: bool) -> Optional[str]:
        self.state = ResolverState.RESOLVED
        img = resolve(persisted, is_privileged)
        if img is None:
            logger.debug("viewer init: no scenery configured")
            return None
        # the host's initial render pass draws it
        self._apply(img, draw=False)
        return img

    def on_scene_updated(
        self, updated_fields: Mapping[str, Any], is_privileged: bool
    ) -> Optional[str]:
        path = self.config.flag_path
        data = get_property(updated_fields, path)
        if data is None:
            logger.debug("scene update does not touch %s", path)
            return None
        self.state = ResolverState.RESOLVED
        img = resolve(data, is_privileged)
        if img is None:
            return None
        self._apply(img, draw=True)
        return img

    def _apply(self, img: str, draw: bool) -> None:
        logger.debug("applying scene image %s (draw=%s)", img, draw)
        self.active_image = img
        self.canvas.apply_image(img)
        if not draw:
            return
        self.canvas.force_redraw()
        if self.scheduler is not None:
            self.scheduler(self.config.redraw_delay_ms, self.canvas.force_redraw)
