"""Test suite for familyhub."""
