"""
Command modules, one file per command, grouped by category.

Files here are executed by the module loader, not imported.
"""
