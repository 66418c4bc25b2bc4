"""Test package marker so test modules import as ``tests.<path>``."""
