"""Storefront backend - B2B marketplace storefront with AI negotiation"""

__version__ = "1.0.0"
