from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from langchain_openai import ChatOpenAI

_chat_model = None


def get_chat_model() -> ChatOpenAI:
    """Chat model shared by every agent turn in this process"""
    global _chat_model
    if _chat_model is None:
        if not settings.OPENAI_API_KEY:
            raise ImproperlyConfigured("OPENAI_API_KEY is required")
        config = settings.AGENT
        _chat_model = ChatOpenAI(
            model=config["MODEL"],
            temperature=config["TEMPERATURE"],
            openai_api_key=settings.OPENAI_API_KEY,
        )
    return _chat_model
