import os
from pathlib import Path
from typing import Optional

import yaml

from relops_core.errors import ReleaseToolError

# Repositories that were retired or merged elsewhere and must not be cloned.
RETIRED_REPOS = [
    "yast-backup",
    "yast-bluetooth",
    "yast-boot-server",
    "yast-cd-creator",
    "yast-certify",
    "yast-cim",
    "yast-databackup",
    "yast-dbus-client",
    "yast-debugger",
    "yast-dialup",
    "yast-dirinstall",
    "yast-fax-server",
    "yast-fingerprint-reader",
    "yast-heartbeat",
    "yast-hpc",
    "yast-ipsec",
    "yast-irda",
    "yast-liby2util",
    "yast-meta",
    "yast-mouse",
    "yast-mysql-server",
    "yast-ntsutils",
    "yast-oem-installation",
    "yast-online-update-test",
    "yast-openschool",
    "yast-openteam",
    "yast-openwsman-yast",
    "yast-packagemanager",
    "yast-packagemanager-test",
    "yast-phone-services",
    "yast-power-management",
    "yast-profile-manager",
    "yast-registration",
    "yast-repair",
    "yast-restore",
    "yast-squidguard",
    "yast-sshd",
    "yast-sudo",
    "yast-support",
    "yast-system-profile",
    "yast-system-update",
    "yast-ui-qt-tests",
    "yast-uml",
    "yast-you-server",
    "yast-yxmlconv",
    "yast-y2pmsh",
    "yast-y2r-tools",
]

DEFAULT_CONFIG: dict = {
    "org": "yast",
    "git_host": "github.com",
    "github_api_url": "https://api.github.com",
    "docker_hub_url": "https://hub.docker.com",
    "repo_cache": ".yast_repos_cache.json",
    "repo_cache_ttl_days": 14,
    "default_branch": "master",
    "ignore": RETIRED_REPOS,
    "images": [],  # default images for `relops image-status`
}


def load_config(config_path: str = ".relops.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .relops.yml in the current directory
      3. CLI argument overrides
    """
    config = {
        **DEFAULT_CONFIG,
        "ignore": list(DEFAULT_CONFIG["ignore"]),
        "images": list(DEFAULT_CONFIG["images"]),
    }

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            kind = type(file_config).__name__
            raise ReleaseToolError(f"{config_path} must contain a mapping of settings, got {kind}")
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Credentials and CI job details come from the environment only.
    config["github_token"] = os.environ.get("GH_TOKEN") or os.environ.get("GITHUB_TOKEN")
    config["job_name"] = os.environ.get("BUILD_DISPLAY_NAME", "")
    config["job_url"] = os.environ.get("BUILD_URL", "")

    return config
