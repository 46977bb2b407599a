"""
PyQt5 user interface.
"""
