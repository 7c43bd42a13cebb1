# Authentication module

from blastdesk.modules.auth.dependencies import (
    get_current_user,
    get_current_super_admin,
)

__all__ = [
    "get_current_user",
    "get_current_super_admin",
]
