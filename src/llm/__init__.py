"""Vision LLM clients."""
