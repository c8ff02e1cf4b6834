"""
Shared utilities for LLM interactions.
"""


def strip_markdown_fences(text: str) -> str:
    """
    Strip markdown code fences from LLM response text.

    Handles patterns like:
        ```json\n{...}\n```
        ```\n{...}\n```
    """
    text = text.strip()
    if text.startswith("```"):
        text = text.split("```")[1]
        if text.startswith("json"):
            text = text[4:]
        text = text.strip()
    return text


def to_openai_tools(tools: list[dict]) -> list[dict]:
    """Convert Anthropic-style tool schemas to OpenAI function tools."""
    return [
        {
            "type": "function",
            "function": {
                "name": t["name"],
                "description": t.get("description", ""),
                "parameters": t.get("input_schema", {}),
            },
        }
        for t in tools
    ]
