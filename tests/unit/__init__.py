"""Unit tests for object-dispatch.

Fast, isolated tests for individual components.
"""
