"""LLM client modules."""
from .openai_client import generate_json, generate_structured, generate_text

__all__ = ["generate_json", "generate_structured", "generate_text"]
