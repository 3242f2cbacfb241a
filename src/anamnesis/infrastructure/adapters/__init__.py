# Infrastructure Adapters Package
from .file_progress import FileProgressRepository

__all__ = ["FileProgressRepository"]
