"""
Data Generation Module
"""
from .generators import CustomerGenerator, DataGenerator, ProductGenerator, SaleGenerator, StoreGenerator

__all__ = [
    "CustomerGenerator",
    "DataGenerator",
    "ProductGenerator",
    "SaleGenerator",
    "StoreGenerator",
]
