"""ImageChat - prompt-to-image chat backend for a local Ollama server."""
