"""OpenAI client construction shared by the trivia commands."""

from __future__ import annotations

import os
from typing import Any

from dotenv import load_dotenv
from openai import OpenAI

__all__ = ["load_client"]


def load_client(*, base_url: str | None = None) -> Any:
    """Return an ``OpenAI`` client using ``OPENAI_API_KEY`` from env/.env."""

    load_dotenv()
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise RuntimeError(
            "OPENAI_API_KEY not found in environment. Set it or add to .env"
        )
    if base_url:
        return OpenAI(api_key=api_key, base_url=base_url)
    return OpenAI(api_key=api_key)
