"""
Pocket Knife - percentage calculator and small product catalog.

Shared utilities (config, logging, paths, errors) live at the package root;
the SQLite product store is in `productdb`, the LLM collaborator in
`assistant`, and the command-line entry point in `cli`.
"""

__version__ = "0.3.0"
