"""Principal resolution from bearer tokens."""
