"""User account management service - registration, profile and credential lifecycle."""
