# src/classification/prompts.py — v1
"""Prompt templates for SEO metadata generation."""

from __future__ import annotations

from mediatagger.batch.models import ProcessingSettings

SYSTEM_PROMPT = "You are an expert in generating SEO-optimized metadata for stock images and videos."

_PLACE_NAMES_ON = "Include specific place names and locations where relevant."
_PLACE_NAMES_OFF = "Do not include specific place names or locations."

_TEMPLATE = """Based on the image, generate a title, a description and a list of keywords.

1. Title:
   - Approximately {title_limit} characters
   - Write only the title and don't include any other text
   - Avoid colons (:) or other special characters in the title
   - {place_names}

2. Description:
   - Approximately {description_limit} characters
   - Write only the description and don't include any other text
   - {place_names}

3. Keywords:
   - Exactly {keyword_limit} relevant, comma-separated keywords, most relevant first
   - Don't use generic words like "image", "photo", "picture", "illustration" or "design"
   - {place_names}

Format response exactly as:
Title: [Your generated title]
Description: [Your description]
Keywords: [keyword1, keyword2, keyword3, ...]"""


def place_name_instruction(include_place_name: bool) -> str:
    return _PLACE_NAMES_ON if include_place_name else _PLACE_NAMES_OFF


def build_metadata_prompt(settings: ProcessingSettings) -> str:
    """Render the user prompt for one file from the run settings."""
    return _TEMPLATE.format(
        title_limit=settings.title_limit,
        description_limit=settings.description_limit,
        keyword_limit=settings.keyword_limit,
        place_names=place_name_instruction(settings.include_place_name),
    )
