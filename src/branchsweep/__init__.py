"""Git branch cleanup tool.

Features:
- Classify local branches as deprecated (merged, squash-merged, upstream deleted)
  or stale (old, or far behind trunk with no commits of their own)
- Interactive menu to delete by category, branch by branch, or as a dry run
- Soft deletes by default, forced deletes only on confirmation or --unsafe
- Merged-only cleanup with selection by number
"""

__version__ = "0.1.0"
