"""Test suite for the gnomad-lite schema validator."""
