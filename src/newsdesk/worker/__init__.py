"""Worker process for scheduled publication."""
