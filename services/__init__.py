"""Session, submission, upload and outcome services."""
