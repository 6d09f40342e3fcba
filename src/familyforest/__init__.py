"""Family tree graph construction and layout."""
