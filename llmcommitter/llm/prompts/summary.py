"""Per-file summary prompt.

The first generation phase asks for a short description of one file's
change. The summaries are later combined by the synthesis prompt.
"""

from typing import Optional

FILE_SUMMARY_PROMPT_TEMPLATE = """Summarize the following change to a single file in 2-4 sentences.
Describe what changed and, if it is evident from the diff, why.
Do not write a commit message. Output only the summary.

Change type: {change_kind}
File: {path}

Diff:
{diff}"""


def build_summary_prompt(
    instructions: str,
    general_context: Optional[str],
    path: str,
    change_kind: str,
    diff: str,
) -> str:
    """Build the prompt that summarizes one file's change.

    Args:
        instructions: The configured instruction template.
        general_context: Project-wide context, omitted when blank.
        path: Repo-relative file path.
        change_kind: added, modified, deleted or renamed.
        diff: The capped diff text.

    Returns:
        The full prompt.
    """
    parts = [instructions.strip(), ""]
    if general_context and general_context.strip():
        parts.extend([f"General Project Context:\n{general_context.strip()}", ""])
    parts.append(FILE_SUMMARY_PROMPT_TEMPLATE.format(change_kind=change_kind, path=path, diff=diff))
    return "\n".join(parts)
