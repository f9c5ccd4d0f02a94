"""Allow ``python -m git_churn``."""

from .cli import main

main()
