"""Turning a model reply into what the bot sends back."""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Union

from loguru import logger

from omnitea.postprocessing import normalize_latex_delimiters
from omnitea.typeset import RenderError

# Anything between a pair of dollar signs counts as math.
MATH_PATTERN = re.compile(r"\$([^$]+)\$")


@dataclass
class TextResponse:
    text: str


@dataclass
class ImageResponse:
    """Rendered pages of the reply, plus the reply's source text."""

    images: list[Path]
    text: str


BotResponse = Union[TextResponse, ImageResponse]


def contains_math(text: str) -> bool:
    return MATH_PATTERN.search(text) is not None


def parse_response(text: str, render: Callable[[str], list[Path]]) -> BotResponse:
    """Render *text* to images if it contains math, otherwise pass it through.

    Rendering failures fall back to a plain text response so the user still
    gets an answer.
    """
    normalized = normalize_latex_delimiters(text)
    if not contains_math(normalized):
        return TextResponse(text)

    try:
        images = render(normalized)
    except RenderError as e:
        logger.error("Rendering failed, sending text instead: {}", e)
        return TextResponse(text)

    if not images:
        logger.warning("Rendering produced no images, sending text instead")
        return TextResponse(text)

    return ImageResponse(images=images, text=text)
