import os

# widgets are built without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
