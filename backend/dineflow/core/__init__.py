"""Core utilities: configuration, security, access policy, caching."""
