"""Core edgeport components: source schema, loading, environments and IR types."""
