"""
Storefront catalog: products, modules, materials, discounts and pricing.
"""
