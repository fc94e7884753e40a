"""
Concrete backend implementations.
"""
