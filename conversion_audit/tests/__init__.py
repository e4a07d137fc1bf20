"""Tests for the conversion audit package."""
