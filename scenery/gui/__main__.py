# scenery/gui/__main__.py
import argparse
import logging
import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication

from scenery.services.scenery_service import SceneryService

from .scene_view import SceneWindow
from .texts import set_locale


def main():
    parser = argparse.ArgumentParser(prog="scenery")
    parser.add_argument("scene", help="scene name under <data>/Scenes")
    parser.add_argument(
        "--data", type=Path, default=Path.home() / ".scenery_data", help="data root"
    )
    parser.add_argument("--image", default="", help="image of a new scene")
    parser.add_argument(
        "--player", action="store_true", help="open only the player view"
    )
    args, qt_args = parser.parse_known_args()

    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    app = QApplication([sys.argv[0], *qt_args])
    service = SceneryService(args.data)
    set_locale(service.storage.get_global_language(default="en"))
    try:
        scene = service.storage.load_scene(args.scene)
    except FileNotFoundError:
        scene = service.storage.create_scene(args.scene, img=args.image)

    windows = [SceneWindow(service, scene, is_privileged=False)]
    if not args.player:
        gm = SceneWindow(service, scene, is_privileged=True)
        # the player window follows what the GM saves
        gm.scene_updated.connect(windows[0].vm.on_scene_updated)
        windows.append(gm)
    for w in windows:
        w.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
