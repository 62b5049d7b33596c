# Copyright (c) Syntropy Systems
"""Token estimation for skill artifacts.

The default estimator is a character-length proxy, not a real tokenizer.
Anything that needs a token count takes an estimator so an exact tokenizer
can be dropped in without touching scoring or gating.
"""

from __future__ import annotations

from typing import Protocol


class TokenEstimator(Protocol):
    """Estimates how many tokens a piece of text costs."""

    def estimate(self, text: str) -> int:
        ...


class CharRatioEstimator:
    """Estimate tokens as floor(len(text) / chars_per_token)."""

    def __init__(self, chars_per_token: int = 4) -> None:
        if chars_per_token <= 0:
            msg = "chars_per_token must be positive"
            raise ValueError(msg)
        self.chars_per_token = chars_per_token

    def estimate(self, text: str) -> int:
        return len(text) // self.chars_per_token


DEFAULT_ESTIMATOR = CharRatioEstimator()


def estimate_tokens(text: str) -> int:
    """Estimate tokens with the default estimator."""
    return DEFAULT_ESTIMATOR.estimate(text)
