"""Quiz authoring and evaluation core."""
