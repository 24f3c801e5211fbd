"""Test suite for rotatefile."""
