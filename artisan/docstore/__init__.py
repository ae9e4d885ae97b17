"""
Schema-less document store used for all storefront data.
"""
