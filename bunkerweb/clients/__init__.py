"""HTTP transport, authentication and request encoding."""
