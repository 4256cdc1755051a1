"""Service layer (settings persistence)."""
