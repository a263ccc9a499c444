"""
multifind - Core Package

Concurrent filename search: one search task per requested filename, each
reporting every match under a search root through a shared result channel.
"""

__version__ = "0.1.0"
__author__ = "multifind developers"
