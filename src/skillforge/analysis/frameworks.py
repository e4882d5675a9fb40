"""Per-content-type extraction frameworks.

A framework is a static schema sent to the analysis service describing
the shape ``extractedData`` should take: leaf strings describe a
free-text field, lists of strings describe an enumerated list, and
nested mappings describe further structure. Read-only at runtime.
"""

from __future__ import annotations

import copy
from typing import Any, TypeAlias

from skillforge.constants import ContentType
from skillforge.resilience.errors import ConfigurationError

Framework: TypeAlias = dict[str, Any]

COPYWRITING_FRAMEWORK: Framework = {
    "core": {
        "bigIdea": "The central unique concept or promise",
        "hook": "Opening that grabs attention",
        "problemPain": "Pain points being addressed",
        "enemyVillain": "What's preventing success/causing pain",
        "promise": "Main benefit or transformation",
        "mechanism": "How the solution works (the 'secret sauce')",
        "proof": "Evidence, testimonials, data, case studies",
        "offer": "What they're getting and at what price",
        "cta": "Call to action and next steps",
    },
    "style": {
        "toneVoice": (
            "Overall communication style"
            " (authoritative, friendly, urgent, etc.)"
        ),
        "psychologicalTriggers": [
            "Urgency",
            "Scarcity",
            "Social proof",
            "Authority",
            "Reciprocity",
        ],
        "emotionalTone": (
            "Primary emotions evoked (fear, hope, excitement, etc.)"
        ),
    },
    "structure": {
        "sentenceStructure": {
            "averageLength": "Number",
            "patterns": [
                "Short punchy opens",
                "Longer explanatory sentences",
            ],
            "variety": "Mix of lengths for rhythm",
        },
        "copyCadence": "Pacing and rhythm (fast, slow, varied)",
        "paragraphFlow": "How paragraphs build on each other",
        "formattingPatterns": [
            "Bullet points",
            "Bold text",
            "Subheadings",
            "P.S. sections",
        ],
        "narrativeFlow": (
            "Story structure (Problem-Agitate-Solve, AIDA, etc.)"
        ),
    },
    "language": {
        "languageStyle": "Direct, conversational, formal, technical, etc.",
        "signaturePhrases": [
            "Recurring words or phrases that define the voice"
        ],
        "wordChoice": "Specific vocabulary patterns",
        "powerWords": ["Words that trigger emotions or action"],
    },
}

PROCESS_FRAMEWORK: Framework = {
    "workflow": {
        "steps": [
            {
                "name": "Step name",
                "description": "What happens",
                "duration": "Time required",
                "owner": "Who's responsible",
            }
        ],
        "decisionPoints": ["Where choices must be made"],
        "dependencies": ["What must happen before each step"],
        "criticalPath": "Steps that cannot be delayed",
    },
    "resources": {
        "toolsRequired": ["Software, equipment, materials needed"],
        "skillsNeeded": ["Competencies required"],
        "peopleInvolved": ["Roles and responsibilities"],
        "documentsNeeded": ["Forms, templates, references"],
    },
    "quality": {
        "successMetrics": ["How to measure success"],
        "qualityChecks": ["Validation points in process"],
        "commonPitfalls": ["What usually goes wrong"],
        "troubleshooting": ["How to fix common problems"],
    },
    "context": {
        "when": "Triggers that initiate the process",
        "frequency": "How often it's performed",
        "variations": "Different scenarios or edge cases",
        "dependencies": "What must exist before starting",
    },
}

TECHNICAL_FRAMEWORK: Framework = {
    "concepts": {
        "mainConcepts": ["Key ideas being explained"],
        "terminology": {"term": "definition with context"},
        "prerequisites": ["What you need to know first"],
        "difficulty": "Beginner, Intermediate, Advanced",
    },
    "implementation": {
        "patterns": ["Design patterns or approaches used"],
        "bestPractices": ["Recommended ways to do things"],
        "antiPatterns": ["Common mistakes to avoid"],
        "examples": [
            {
                "scenario": "Use case",
                "code": "Implementation",
                "explanation": "Why it works",
            }
        ],
    },
    "architecture": {
        "components": ["System parts and their purposes"],
        "dataFlow": "How information moves",
        "integrations": ["External systems or APIs"],
        "scalability": "Performance considerations",
    },
}

FRAMEWORKS: dict[ContentType, Framework] = {
    ContentType.COPYWRITING: COPYWRITING_FRAMEWORK,
    ContentType.PROCESS: PROCESS_FRAMEWORK,
    ContentType.TECHNICAL: TECHNICAL_FRAMEWORK,
}


def available_content_types() -> list[str]:
    """Content types that have a registered framework."""
    return [str(ct) for ct in FRAMEWORKS]


def get_framework(content_type: str) -> Framework:
    """Return a copy of the framework for ``content_type``.

    Raises ConfigurationError for an unregistered type.
    """
    try:
        framework = FRAMEWORKS[ContentType(content_type)]
    except ValueError as exc:
        raise ConfigurationError(
            f"No framework registered for content type: {content_type}"
        ) from exc
    return copy.deepcopy(framework)
