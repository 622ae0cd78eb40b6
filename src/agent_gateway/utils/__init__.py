"""Shared utilities."""

from agent_gateway.utils.logger import setup_logger
from agent_gateway.utils.text_cache import TextConversionCache, simplified_to_traditional

__all__ = ["setup_logger", "TextConversionCache", "simplified_to_traditional"]
