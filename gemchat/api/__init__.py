"""FastAPI relay between chat clients and the LLM provider."""
