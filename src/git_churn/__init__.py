"""
git-churn - continuous synthetic activity for Git repositories.

Generates random filler files, commits them, and pushes commits and
freshly minted tags to a remote in an endless loop.
"""

__version__ = "1.0.0"
