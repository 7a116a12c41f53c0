"""gitai — AI-powered Git commit message generator using local Ollama models."""

__version__ = "1.0.0"
