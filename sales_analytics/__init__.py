"""
Sales Analytics

Customer and product reporting and segmentation over a sales star schema.
"""

__version__ = "1.0.0"
