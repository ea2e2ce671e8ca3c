"""Package scanned by the discovery tests."""
