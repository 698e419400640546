"""Interactive read/write mounting of external NTFS drives on macOS."""
