"""
Electronics Retailer Analytics
Batch analytical reports over the retail star schema
"""

__version__ = "1.0.0"
