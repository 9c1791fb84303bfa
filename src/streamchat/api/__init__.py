"""HTTP API for streamchat."""
