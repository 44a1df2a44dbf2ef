"""Root conftest — sets env vars BEFORE any brewbuild module is imported.

load_settings() falls back to ``brewbuild_dir()`` and the BREWBUILD_* env
vars, so point them at a throwaway directory and clear any real overrides
to keep the developer's own configuration out of the tests.
"""

import os
import tempfile

# Force-set (not setdefault) to prevent real env vars from leaking into tests
os.environ["BREWBUILD_DIR"] = tempfile.mkdtemp(prefix="brewbuild-test-")
for _key in ("BREWBUILD_TEMP", "BREWBUILD_GROUP_REFERENCE", "BREWBUILD_FALLBACK_GID"):
    os.environ.pop(_key, None)
