"""Public form resolution, validation and submission engine."""
