import os
import tempfile

import pytest

# Log files and uploads of the whole session go to a throwaway directory; set before
# any codereview module creates its loggers.
_SESSION_DIR = tempfile.mkdtemp(prefix="codereview-tests-")
os.environ.setdefault("CODEREVIEW__APP__LOG_DIR", os.path.join(_SESSION_DIR, "logs"))
os.environ.setdefault("CODEREVIEW__STORAGE__LOCAL_DIR", os.path.join(_SESSION_DIR, "uploads"))
os.environ.setdefault("CODEREVIEW__AUTH__JWT_SECRET", "test-secret-key")

from codereview.core import reset_config  # noqa: E402


@pytest.fixture(autouse=True)
def reset_settings():
    """Reload configuration from the environment for every test."""
    reset_config()
    yield
    reset_config()
