"""
slotbook - appointment slot availability for booking forms.
"""

__version__ = "0.1.0"
