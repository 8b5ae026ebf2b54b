"""Remote table browsing and editing over a SQL-over-HTTP query endpoint."""
