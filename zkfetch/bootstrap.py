# zkfetch/bootstrap.py
"""
Project bootstrap: create .env from the template and check the checkout.
"""

import logging
import shutil
from pathlib import Path

log = logging.getLogger("zkfetch.bootstrap")

ENV_TEMPLATE = ".env.example"
ENV_FILE = ".env"

SETUP_CHECKS = {
    "pyproject.toml": "pyproject.toml",
    "package directory": "zkfetch",
    "tests directory": "tests",
    ".env file": ENV_FILE,
}


def create_env_file(root=".") -> bool:
    """Copy .env.example to .env. Returns True if a file was created."""
    root = Path(root)
    env_path = root / ENV_FILE
    template = root / ENV_TEMPLATE

    if env_path.exists():
        log.info(f"{ENV_FILE} already exists")
        return False
    if not template.exists():
        log.warning(f"{ENV_TEMPLATE} not found in {root}")
        return False

    shutil.copyfile(template, env_path)
    log.info(f"Created {ENV_FILE} from template; edit it with your seed phrase and app credentials")
    return True


def validate_setup(root=".") -> dict:
    root = Path(root)
    return {name: (root / rel).exists() for name, rel in SETUP_CHECKS.items()}
