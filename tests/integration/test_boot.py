"""The project must start from a cold interpreter, as runserver and celery do."""

import os
import subprocess
import sys
from pathlib import Path

import pytest

pytestmark = pytest.mark.integration

SRC_DIR = Path(__file__).resolve().parents[2] / "src"


def _run(*args: str) -> subprocess.CompletedProcess:
    env = {**os.environ, "DJANGO_SETTINGS_MODULE": "config.settings_test"}
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC_DIR), env.get("PYTHONPATH")]))
    return subprocess.run(
        [sys.executable, *args],
        cwd=SRC_DIR,
        env=env,
        capture_output=True,
        text=True,
        timeout=120,
    )


def test_django_setup_in_fresh_interpreter():
    result = _run("-c", "import django; django.setup()")

    assert result.returncode == 0, result.stderr


def test_manage_py_check_passes():
    result = _run("manage.py", "check")

    assert result.returncode == 0, result.stderr
    assert "no issues" in result.stdout


def test_default_authentication_class_resolves():
    result = _run(
        "-c",
        "import django; django.setup();"
        "from rest_framework.settings import api_settings;"
        "print(api_settings.DEFAULT_AUTHENTICATION_CLASSES[0].__name__)",
    )

    assert result.returncode == 0, result.stderr
    assert result.stdout.strip() == "SessionTokenAuthentication"
