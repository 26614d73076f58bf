import os
import sys


# Ensure `src` is on sys.path so `import chainrules` works without an editable install,
# even when pytest's rootdir is the repository root.
SRC_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)
