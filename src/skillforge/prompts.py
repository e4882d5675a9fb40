"""LLM prompts for content analysis.

All prompts sent to the analysis service live here. The framework for
the requested content type is embedded verbatim (pretty-printed JSON)
so the service knows the exact shape ``extractedData`` must take.
"""

from __future__ import annotations

import json

from skillforge.analysis.frameworks import Framework

# ── System prompt ─────────────────────────────────────────────────

SYSTEM_PROMPT_TEMPLATE = """\
You are an expert content analyst specializing in extracting structured \
knowledge from {content_type} content.

Your role:
- Extract structured knowledge from content
- Identify patterns and frameworks
- Return valid JSON responses
- Be specific and accurate

Guidelines:
- Quote exact phrases when possible
- Infer implicit patterns
- Use null for missing elements
- Provide confidence scores"""

# ── Analysis prompt ───────────────────────────────────────────────

ANALYSIS_INSTRUCTIONS = """\
**INSTRUCTIONS:**
1. Read the content carefully
2. Extract ALL elements from the framework that appear in the content
3. For elements not explicitly stated, infer them from patterns and context
4. Return a structured JSON response following the framework exactly
5. Be specific - quote actual phrases when possible
6. Identify patterns, not just surface content

**OUTPUT FORMAT:**
Return valid JSON matching the framework structure. For each element:
- If explicitly present: Extract the exact wording
- If implicit: Describe the pattern observed
- If missing: Use null

**CONFIDENCE SCORING:**
Also provide a confidence score (0-1) for your analysis quality.

Return format:
{
  "extractedData": { /* framework data */ },
  "confidence": 0.95,
  "notes": "Any observations about the content"
}"""


def build_system_prompt(content_type: str) -> str:
    return SYSTEM_PROMPT_TEMPLATE.format(content_type=content_type)


def build_analysis_prompt(
    content: str, content_type: str, framework: Framework
) -> str:
    """Assemble the user prompt: content, framework, then instructions."""
    return (
        f"You are an expert {content_type} analyst. Analyze the following"
        " content and extract knowledge using this framework.\n\n"
        f"**CONTENT TO ANALYZE:**\n{content}\n\n"
        f"**EXTRACTION FRAMEWORK:**\n{json.dumps(framework, indent=2)}\n\n"
        f"{ANALYSIS_INSTRUCTIONS}"
    )
