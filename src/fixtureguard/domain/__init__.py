"""Domain layer for fixtureguard.

Pure types and functions: no I/O, no framework imports.
"""
