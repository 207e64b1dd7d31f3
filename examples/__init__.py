"""Example applications built on storelite.

This package demonstrates library usage but is not part of the core API.
"""
