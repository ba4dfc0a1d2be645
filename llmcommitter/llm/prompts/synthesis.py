"""Commit message synthesis prompt."""

from typing import Optional, Sequence

SYNTHESIS_CLOSING_LINE = (
    "Based on the above context and changes, generate a single, concise Git commit message:"
)


def build_synthesis_prompt(
    instructions: str,
    general_context: Optional[str],
    specific_context: Optional[str],
    summaries: Sequence[tuple[str, str]],
) -> str:
    """Build the prompt that turns per-file summaries into one commit message.

    Args:
        instructions: The configured instruction template.
        general_context: Project-wide context, omitted when blank.
        specific_context: Context for this group of changes, omitted when blank.
        summaries: Ordered (path, summary) pairs.

    Returns:
        The full prompt.
    """
    parts = [instructions.strip(), ""]
    if general_context and general_context.strip():
        parts.extend([f"General Project Context:\n{general_context.strip()}", ""])
    if specific_context and specific_context.strip():
        parts.extend([f"Specific Context for This Change:\n{specific_context.strip()}", ""])
    if summaries:
        parts.extend(["Files and Changes:", ""])
        for path, summary in summaries:
            parts.extend([f"File: {path}", summary, ""])
    parts.append(SYNTHESIS_CLOSING_LINE)
    return "\n".join(parts)
