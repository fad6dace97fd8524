"""National Weather Service alert feed adapter."""
