"""Price oracles consumed by the guess services."""
