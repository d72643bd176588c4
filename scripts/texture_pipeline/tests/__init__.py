"""
Tests for the texture pipeline.
"""
