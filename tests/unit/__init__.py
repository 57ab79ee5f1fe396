"""Unit tests for wrsample."""
