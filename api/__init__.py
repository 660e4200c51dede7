"""ClaimCadence HTTP service."""
