"""Per-token prices for the chat models and the cost estimate built on them."""
from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, NamedTuple

from .errors import InvalidInput


class ModelPrice(NamedTuple):
    input: float
    output: float


PRICING: Mapping[str, ModelPrice] = MappingProxyType(
    {
        "gpt-3.5-turbo-0125": ModelPrice(input=0.5 / 1_000_000, output=1.5 / 1_000_000),
        "gpt-3.5-turbo-instruct": ModelPrice(input=1.5 / 1_000_000, output=2.5 / 1_000_000),
        "gpt-4-0125-preview": ModelPrice(input=10 / 1_000_000, output=30 / 1_000_000),
        "gpt-4-turbo-2024-04-09": ModelPrice(input=10 / 1_000_000, output=30 / 1_000_000),
        "gpt-4o": ModelPrice(input=5 / 1_000_000, output=15 / 1_000_000),
    }
)


def estimate_cost(model: str, input_tokens: int, output_tokens: int) -> float:
    """Cost in USD of one model call with the given token counts."""
    if not model:
        raise InvalidInput("model is required")
    if not input_tokens:
        raise InvalidInput("input_tokens is required")
    if not output_tokens:
        raise InvalidInput("output_tokens is required")
    price = PRICING[model]
    return price.input * input_tokens + price.output * output_tokens
