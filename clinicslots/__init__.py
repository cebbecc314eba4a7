"""
clinicslots - Browse doctor availability and book 30-minute appointment slots.
"""

__version__ = "0.1.0"
