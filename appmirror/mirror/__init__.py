"""
Mirror — Keep a local copy of selected registry apps current and intact.

This module provides the import/update orchestration, the on-disk store
and the read-only verification pass.
"""
