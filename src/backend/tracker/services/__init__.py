"""
Startup services: token table, per-token provisioning and bootstrap.
"""

from tracker.services.bootstrap import AppConfig, init_app_config
from tracker.services.provisioner import provision_resources
from tracker.services.token_table import TokenTable, build_token_table

__all__ = [
    "AppConfig",
    "init_app_config",
    "provision_resources",
    "TokenTable",
    "build_token_table",
]
