"""Routing — explicit trie routes and ordered conditional routes.

Both tables are filled during setup and frozen before the first request.
"""
