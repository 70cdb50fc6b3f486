"""Podcast script prompts and parsing of the structured LLM response."""
from typing import List, Optional

from docanalyzer.config import settings
from docanalyzer.models import PodcastScript

REGISTRATION_NOTICE = "... [Full content available for registered users]"

PODCAST_PROMPT = '''You are creating a podcast-style analysis of a selected passage from "{title}".

Selected passage:
"""
{passage}
"""

Create a comprehensive podcast script following this EXACT structure:

PODCAST TITLE: [Create an engaging title for this passage]

SUMMARY: [Provide a brief, clear summary of the selected passage in 2-3 sentences]

STRENGTHS AND WEAKNESSES: [Discuss the strengths and potential weaknesses or limitations of this passage]

READER GAINS: [Explain what the reader can gain from this passage and what might be difficult or subtle to understand]

KEY QUOTATIONS: [Provide exactly 5 representative quotations from the selected text, each on a new line starting with "Quote 1:", "Quote 2:", etc.]

FULL SCRIPT: [Write the complete podcast narration script that flows naturally and incorporates all the above elements into a cohesive spoken narrative]

CRITICAL REQUIREMENTS:
- Use clear section headers exactly as shown above
- Make the FULL SCRIPT section sound natural when spoken aloud
- Include all 5 quotations within the full script
- Total length should be 3-5 minutes when spoken (roughly 400-700 words for full script)'''

CUSTOM_PROMPT = '''{instructions}

Selected passage:
"""
{passage}
"""

Please analyze this passage according to your custom instructions above.'''


def build_podcast_prompt(selected_text: str, document_title: str, custom_instructions: Optional[str] = None) -> str:
    if custom_instructions:
        return CUSTOM_PROMPT.format(instructions=custom_instructions, passage=selected_text)
    return PODCAST_PROMPT.format(title=document_title, passage=selected_text)


def extract_section(text: str, start_marker: str, end_markers: List[str]) -> str:
    """Return the text after start_marker up to the nearest end marker ("" if absent)."""
    start = text.find(start_marker)
    if start == -1:
        return ""
    content_start = start + len(start_marker)
    content_end = len(text)
    for marker in end_markers:
        index = text.find(marker, content_start)
        if index != -1 and index < content_end:
            content_end = index
    return text[content_start:content_end].strip()


def extract_quotations(text: str) -> List[str]:
    section = extract_section(text, "KEY QUOTATIONS:", ["FULL SCRIPT:"])
    quotations = []
    for i in range(1, 6):
        marker = f"Quote {i}:"
        index = section.find(marker)
        if index == -1:
            continue
        quote_start = index + len(marker)
        quote_end = section.find(f"Quote {i + 1}:", quote_start)
        quote = section[quote_start:quote_end if quote_end != -1 else len(section)].strip()
        if quote:
            quotations.append(quote)
    return quotations


def parse_podcast_response(response: str) -> PodcastScript:
    """Split an LLM podcast response into its sections, with defaults for missing ones."""
    return PodcastScript(
        title=extract_section(response, "PODCAST TITLE:", ["SUMMARY:", "STRENGTHS"]) or "Podcast Analysis",
        summary=extract_section(response, "SUMMARY:", ["STRENGTHS AND WEAKNESSES:", "READER GAINS:"])
        or "Analysis of selected passage",
        strengths_weaknesses=extract_section(response, "STRENGTHS AND WEAKNESSES:", ["READER GAINS:", "KEY QUOTATIONS:"])
        or "Examining the passage's merits and limitations",
        reader_gains=extract_section(response, "READER GAINS:", ["KEY QUOTATIONS:", "FULL SCRIPT:"])
        or "Insights and understanding from this passage",
        quotations=extract_quotations(response),
        full_script=extract_section(response, "FULL SCRIPT:", []) or response,
    )


def truncate_script_for_unregistered(script: PodcastScript, max_words: Optional[int] = None) -> PodcastScript:
    if max_words is None:
        max_words = settings.unregistered_script_words

    def truncate(text: str) -> str:
        words = text.split()
        if len(words) <= max_words:
            return text
        return " ".join(words[:max_words]) + REGISTRATION_NOTICE

    return script.model_copy(update={
        "summary": truncate(script.summary),
        "strengths_weaknesses": truncate(script.strengths_weaknesses),
        "reader_gains": truncate(script.reader_gains),
        "full_script": truncate(script.full_script),
    })
