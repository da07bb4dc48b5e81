"""CBC Weather count-day backend."""
