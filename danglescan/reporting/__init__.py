"""Report writers for DANGLESCAN scan results."""
