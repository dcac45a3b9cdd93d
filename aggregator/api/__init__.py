"""HTTP API for the Aerodrome connector."""
