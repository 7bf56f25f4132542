"""Command executors."""

from .base import BaseExecutor
from .subprocess_executor import SubprocessExecutor

__all__ = ["BaseExecutor", "SubprocessExecutor"]
