"""
gh-control - List, inspect and toggle visibility of your GitHub repositories.

"Your repos, your rules. Just double-check whose repos they are."
"""

__version__ = "1.1.0"
__author__ = "Eronielle Miranda"
__license__ = "MIT"

from .models import Config, RepoFilter, RepoSelector, RepositoryIdentity, Visibility

__all__ = [
    "Config",
    "RepoFilter",
    "RepoSelector",
    "RepositoryIdentity",
    "Visibility",
    "__version__",
]
