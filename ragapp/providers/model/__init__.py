"""Model provider adapters.

Three concrete implementations of IModelProvider (ragapp/interfaces/model_provider.py),
each owning both embeddings and text generation:
    - OpenAIModelProvider -- text-embedding-3-small + gpt-4o-mini
    - OllamaModelProvider -- nomic-embed-text + llama3 on a local Ollama server
    - GoogleModelProvider -- gemini-embedding-001 + Gemini text model

ragapp/providers/factory.py picks one from LLM_PROVIDER at startup.
"""

from ragapp.providers.model.google_provider import GoogleModelProvider
from ragapp.providers.model.ollama_provider import OllamaModelProvider
from ragapp.providers.model.openai_provider import OpenAIModelProvider

__all__ = ["GoogleModelProvider", "OllamaModelProvider", "OpenAIModelProvider"]
