"""UNIHUB notification service package.

Ensures the local ``unihub`` package is resolved as a regular package rather
than through namespace package lookup.
"""
