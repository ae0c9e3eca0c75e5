"""
rgh - Remote GitHub workflow runner.

This package provides tools for:
- Resolving a workflow name to its workflow file
- Dispatching workflow_dispatch events through the GitHub REST API
- Identifying the run a dispatch created (the API does not return it)
- Committing/pushing local work and following the run afterwards
"""

__version__ = "0.3.0"
