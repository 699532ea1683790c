"""Prompt templates for the content provider."""
from typing import Optional

_RESPONSE_FORMAT = """
Alongside the poem, pick a palette of 3 to 5 distinct hex colours from the image:
either its dominant or most striking tones, or colours that carry its mood.

Respond with a single JSON object and nothing else:
{
  "title": "Title of the poem",
  "poem": "Text of the poem, using \\n between lines",
  "palette": ["#hex1", "#hex2", "#hex3"]
}
No markdown, no code fences.
"""

BASIC_PROMPT = """
You are a poet and a painter looking at a photograph.
Write a short, evocative poem inspired by it, no more than 6 lines.
Notice the mood, the light and the small details most people would miss.
""" + _RESPONSE_FORMAT

DIRTY_LIMERICK_PROMPT = """
You are a poet and a painter looking at a photograph.
Write a cheeky, slightly rude, slightly insulting limerick inspired by it.
Notice the mood, the light and the small details most people would miss.
""" + _RESPONSE_FORMAT

HAIKU_PROMPT = """
You are a poet and a painter looking at a photograph.
Write a cheeky, slightly mean haiku inspired by it, no more than 5 lines.
Notice the mood, the light and the small details most people would miss.
""" + _RESPONSE_FORMAT

PROMPTS_BY_TYPE = {
    "dirty-limerick": DIRTY_LIMERICK_PROMPT,
    "dirty-haiku": HAIKU_PROMPT,
}


def prompt_for(poem_type: Optional[str]) -> str:
    """Prompt for the requested poem type; unknown types get the basic prompt."""
    return PROMPTS_BY_TYPE.get(poem_type or "", BASIC_PROMPT)


def sketch_prompt(title: str, poem: str) -> str:
    return (
        "Draw a simple, loose ink sketch that illustrates the following poem. "
        "No text or lettering in the image.\n\n"
        f"Title: {title}\n\n{poem}"
    )
