"""
Test suite for the docpager package.
"""
