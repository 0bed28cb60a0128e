"""
Runtime for dispatch objects: class registry, instance construction,
introspection.
"""
