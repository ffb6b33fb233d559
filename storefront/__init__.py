"""License Storefront - software license seat store"""

__version__ = "1.0.0"
