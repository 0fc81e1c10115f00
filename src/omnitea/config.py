"""Configuration loading from environment variables and CLI flags."""

import os
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from omnitea.prompt import load_prompt


class Provider(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


DEFAULTS = {
    Provider.OPENAI: "gpt-3.5-turbo",
    Provider.ANTHROPIC: "claude-sonnet-4-6",
}

# Checked in order; the first one set wins.
ENV_KEYS = {
    Provider.OPENAI: ("OPENAI_API_KEY", "OPENAI_KEY"),
    Provider.ANTHROPIC: ("ANTHROPIC_API_KEY",),
}

DISCORD_TOKEN_ENV = "DISCORD_TOKEN"
CHANNEL_NAME_ENV = "CHANNEL_NAME"
PROMPT_FILE_ENV = "PROMPT_FILE"

DEFAULT_CHANNEL_NAME = "omnitea"

# Context window of the default model, minus headroom for the reply.
MAX_CONTEXT_TOKENS = 4096 - 500


@dataclass
class Config:
    provider: Provider
    model: str
    api_key: str
    discord_token: str
    channel_name: str = DEFAULT_CHANNEL_NAME
    prompt: str = ""
    max_context_tokens: int = MAX_CONTEXT_TOKENS
    work_dir: Path = Path(tempfile.gettempdir())

    @classmethod
    def from_env(
        cls,
        provider: Provider,
        model_override: Optional[str] = None,
        api_key_override: Optional[str] = None,
        discord_token_override: Optional[str] = None,
        channel_override: Optional[str] = None,
        prompt_file_override: Optional[Path] = None,
        max_context_tokens: int = MAX_CONTEXT_TOKENS,
        work_dir: Optional[Path] = None,
    ) -> "Config":
        model = model_override or DEFAULTS[provider]

        api_key = api_key_override or _first_env(ENV_KEYS[provider])
        if not api_key:
            raise RuntimeError(
                f"No API key for {provider.value}. "
                f"Set {ENV_KEYS[provider][0]} in your environment or .env file."
            )

        discord_token = discord_token_override or os.environ.get(DISCORD_TOKEN_ENV, "")
        if not discord_token:
            raise RuntimeError(
                f"No Discord bot token. Set {DISCORD_TOKEN_ENV} in your environment or .env file."
            )

        channel_name = channel_override or os.environ.get(CHANNEL_NAME_ENV) or DEFAULT_CHANNEL_NAME

        prompt_file = prompt_file_override or os.environ.get(PROMPT_FILE_ENV) or None
        try:
            prompt = load_prompt(Path(prompt_file) if prompt_file else None)
        except OSError as e:
            raise RuntimeError(f"Could not read prompt file {prompt_file}: {e}") from e

        if max_context_tokens <= 0:
            raise RuntimeError("max_context_tokens must be positive.")

        return cls(
            provider=provider,
            model=model,
            api_key=api_key,
            discord_token=discord_token,
            channel_name=channel_name,
            prompt=prompt,
            max_context_tokens=max_context_tokens,
            work_dir=work_dir or Path(tempfile.gettempdir()),
        )


def _first_env(names: tuple[str, ...]) -> str:
    for name in names:
        value = os.environ.get(name)
        if value:
            return value
    return ""
