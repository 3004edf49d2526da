"""HTTP surface of the interview form server."""
