import pathlib
import sys

# Ensure src/ and tests/ are importable when running without an editable install
ROOT = pathlib.Path(__file__).resolve().parents[1]
for path in (ROOT / "src", ROOT / "tests"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))
