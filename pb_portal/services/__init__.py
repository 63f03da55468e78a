"""Services for area configuration and round finances."""
