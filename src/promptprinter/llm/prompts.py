"""Prompt templates for the prompt-optimization request."""

from textwrap import dedent


def build_system_prompt(output_language: str) -> str:
    """Build the fixed optimization directive.

    Args:
        output_language: Language the optimized prompt and change log must use

    Returns:
        System directive text
    """
    return dedent(f"""
        You are an expert AI Architect. Your task is to optimize the prompt provided by the user.

        Rules:
        1. **Language:** The output MUST be in **{output_language}**. Both 'optimizedPrompt' and 'changeLog' must be written in {output_language}.
        2. **Optimization:** Add technical constraints, robust error handling, and performance considerations.
        3. **Formatting:** Use professional, well-structured Markdown.
        4. **Strict Integrity:** You MUST PRESERVE ALL business logic, specific requirements, and functional details from the original text. **DO NOT** remove, summarize, or simplify any user-defined business rules. The goal is to structure and enhance, not to abridge.
        5. **Specifics:** If the prompt mentions features such as "Upload" or "Export", add concrete technical details (e.g. file size limits, accepted formats).

        Return ONLY a JSON object with this structure:
        {{
          "optimizedPrompt": "string (the full rewritten prompt)",
          "changeLog": ["string", "string"]
        }}
        "changeLog" lists each specific improvement you made.
    """).strip()


def build_user_message(title: str, content: str) -> str:
    """Build the user message carrying the prompt being optimized.

    Args:
        title: Prompt title
        content: Current draft text

    Returns:
        User message text
    """
    return f"Title: {title}\nContent:\n{content}"


def build_analysis_messages(title: str, content: str, output_language: str) -> list[dict[str, str]]:
    """Build chat messages for chat-style backends (system + user).

    Args:
        title: Prompt title
        content: Current draft text
        output_language: Required output language

    Returns:
        List of message dicts with 'role' and 'content' keys
    """
    return [
        {"role": "system", "content": build_system_prompt(output_language)},
        {"role": "user", "content": build_user_message(title, content)},
    ]


def build_single_turn_prompt(title: str, content: str, output_language: str) -> str:
    """Build one combined prompt for backends that take a single user turn.

    Args:
        title: Prompt title
        content: Current draft text
        output_language: Required output language

    Returns:
        System directive and user message joined by a blank line
    """
    return build_system_prompt(output_language) + "\n\n" + build_user_message(title, content)
