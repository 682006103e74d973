"""Natural-language front end: an OpenAI-compatible chat client and the tools it may call."""
