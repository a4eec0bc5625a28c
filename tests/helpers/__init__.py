"""Test helper modules for the oddments test suite.

- files: writing fixture files and snapshotting directory trees
"""
