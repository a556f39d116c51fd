"""
Low-level building blocks: paths, sizes, cancellation, folder cache.
"""
