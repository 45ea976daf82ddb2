"""Provider API clients."""
