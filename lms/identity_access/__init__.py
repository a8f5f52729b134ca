"""Identity and access: caller roles, perspectives and sessions."""
