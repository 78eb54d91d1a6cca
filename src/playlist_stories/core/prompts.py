"""Prompt templates for every generative call the pipeline makes."""

from __future__ import annotations

from dataclasses import dataclass

_PUNCTUATION_SYSTEM = (
    "You are an assistant that formats unstructured transcripts into well-punctuated, "
    "readable text. IMPORTANT: keep as much of the same source text as possible and do "
    "not rephrase."
)
_OUTLINE_SYSTEM = (
    "You are a virtual assistant. Your job is to reformat the given text into an outline "
    "as numbered list format in markdown. Keep as much detail as possible. Use markdown "
    "format numbered list. Do not use headings, just use a numbered list. Continue the "
    "list based on the number provided. IMPORTANT: keep all the content, merely reword "
    "and reformat it into a numbered list - DO NOT SUMMARIZE."
)
_STORY_SYSTEM = (
    "You are a skilled children's storyteller that turns factual, non-fiction content "
    "into engaging, descriptive, and captivating stories for young children. Write an "
    "engaging and detailed novel-like biography story. Write in the style similar to "
    "Jean Fritz and Brad Meltzer."
)
_COMPACTION_SYSTEM = "Summarize the following text while preserving key details and style."


@dataclass(frozen=True)
class PromptSet:
    """System prompts plus builders for the matching user prompts."""

    punctuation_system: str = _PUNCTUATION_SYSTEM
    outline_system: str = _OUTLINE_SYSTEM
    story_system: str = _STORY_SYSTEM
    compaction_system: str = _COMPACTION_SYSTEM
    source_notes: str = ""

    def boundary_prompt(self, window: str) -> str:
        return (
            "Find the best natural sentence or paragraph boundary within the following "
            f'text snippet:\n\n"{window}"\n\n'
            "Return only the character index where the best split should occur."
        )

    def punctuation_system_prompt(self) -> str:
        notes = self.source_notes.strip()
        if not notes:
            return self.punctuation_system
        return f"{self.punctuation_system} {notes}"

    def punctuation_prompt(self, text: str) -> str:
        return f"Fix the punctuation in the following text while maintaining its meaning:\n\n{text}"

    def outline_prompt(self, chunk: str, last_number: int) -> str:
        return (
            "Turn this section into a numbered outline using markdown "
            f"(the previous number in the list was {last_number}): \n\n{chunk}"
        )

    def story_prompt(self, chunk: str, rolling_summary: str) -> str:
        return (
            f"Here is summary from the previous part of the story:\n\n{rolling_summary}\n\n"
            f"Continue the story in the same style using this new content:{chunk}"
        )
