"""Small shared utilities."""

from .tasks import cancel_task
from .env import env_choice

__all__ = ["cancel_task", "env_choice"]
