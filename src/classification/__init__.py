"""Vision classification: prompts, client, response parsing."""
