"""
Current authenticated user: document, token, permissions and lifecycle events.
"""

from usersession.core.user.manager import User
from usersession.core.user.models import UserConfig, load_user_config

__all__ = ["User", "UserConfig", "load_user_config"]
