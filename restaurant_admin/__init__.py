"""
                Restaurant Admin

Admin backend for a restaurant catalog and delivery-order workflow,
backed by a cloud document store and an image hosting service.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
