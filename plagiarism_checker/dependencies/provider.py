# plagiarism_checker/dependencies/provider.py

from fastapi import Request

from plagiarism_checker.utils.gemini_client import GeminiClient


def get_provider(request: Request) -> GeminiClient:
    """The one GeminiClient built at startup (see main.lifespan)."""
    return request.app.state.provider
