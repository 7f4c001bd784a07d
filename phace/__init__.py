"""
Phace - medical spa store, booking and admin backend
"""
__version__ = "1.0.0"
