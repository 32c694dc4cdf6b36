import os
import subprocess
import sys
import pytest

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


@pytest.mark.parametrize("module", [
    "tracker_auth.models.user",
    "tracker_auth.models.refresh_token",
    "tracker_auth.models",
    "tracker_auth.seed",
    "tracker_auth.main",
])
def test_module_imports_in_fresh_interpreter(module):
    env = {
        **os.environ,
        "PYTHONPATH": PROJECT_ROOT,
        "JWT_ACCESS_SECRET": "import-access-secret-0123456789abcdefgh",
        "JWT_REFRESH_SECRET": "import-refresh-secret-0123456789abcdefg",
    }

    result = subprocess.run(
        [sys.executable, "-c", f"import {module}"],
        cwd=PROJECT_ROOT,
        env=env,
        capture_output=True,
        text=True,
        timeout=60
    )

    assert result.returncode == 0, result.stderr
