"""Per-content-type skill template sets.

Each set has one main document and a fixed group of reference
documents (``practices.md``, ``structure.md``, ``examples.md``).
Templates are data: tuples of blocks from ``rendering.blocks``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypeAlias

from skillforge.constants import ContentType
from skillforge.rendering.blocks import (
    Block,
    Bullets,
    Examples,
    Heading,
    Steps,
    Terms,
    Text,
    Value,
)

Template: TypeAlias = tuple[Block, ...]


@dataclass(frozen=True)
class TemplateSet:
    main: Template
    references: dict[str, Template] = field(
        default_factory=lambda: dict[str, Template]()
    )


def section(title: str, level: int, *body: Block) -> Template:
    """A heading followed by its body blocks."""
    return (Heading(title, level), *body)


def _description() -> Template:
    return section("Description", 2, Text("{description}"))


# ── Copywriting ──────────────────────────────────────────

_COPY_SENTENCES: Template = (
    Value(
        "structure.sentenceStructure.averageLength",
        label="Average Length",
        suffix=" words",
    ),
    Text("**Patterns:**"),
    Bullets("structure.sentenceStructure.patterns"),
)

COPYWRITING_TEMPLATES = TemplateSet(
    main=(
        Heading("{skill_name} Copywriting Skill"),
        *_description(),
        Heading("Core Copywriting Framework", 2),
        *section("Big Idea", 3, Value("core.bigIdea")),
        *section("Hook Patterns", 3, Value("core.hook")),
        *section("Problem/Pain Points", 3, Value("core.problemPain")),
        *section("Enemy/Villain", 3, Value("core.enemyVillain")),
        *section("Promise", 3, Value("core.promise")),
        *section("Mechanism", 3, Value("core.mechanism")),
        *section("Proof Elements", 3, Bullets("core.proof")),
        *section("Offer Structure", 3, Value("core.offer")),
        *section("Call to Action", 3, Value("core.cta")),
        Heading("Style Guide", 2),
        *section("Tone & Voice", 3, Value("style.toneVoice")),
        *section(
            "Psychological Triggers",
            3,
            Bullets("style.psychologicalTriggers"),
        ),
        *section("Emotional Tone", 3, Value("style.emotionalTone")),
        Heading("Structure & Patterns", 2),
        *section("Sentence Structure", 3, *_COPY_SENTENCES),
        *section("Copy Cadence", 3, Value("structure.copyCadence")),
        *section("Paragraph Flow", 3, Value("structure.paragraphFlow")),
        *section(
            "Formatting Patterns",
            3,
            Bullets("structure.formattingPatterns"),
        ),
        *section("Narrative Flow", 3, Value("structure.narrativeFlow")),
        Heading("Language Style", 2),
        *section("Language Style", 3, Value("language.languageStyle")),
        *section(
            "Signature Phrases",
            3,
            Bullets("language.signaturePhrases", quote=True),
        ),
        *section("Power Words", 3, Bullets("language.powerWords")),
        *section(
            "Usage Instructions",
            2,
            Text(
                "When writing copy using this skill:\n"
                "1. Start with the hook pattern identified above\n"
                "2. Address the core pain points\n"
                "3. Use the psychological triggers throughout\n"
                "4. Follow the narrative flow structure\n"
                "5. End with the call to action pattern"
            ),
        ),
        *section(
            "References",
            2,
            Text(
                "See the `references/` folder for:\n"
                "- Detailed copywriting practices\n"
                "- Sentence structure patterns\n"
                "- Complete examples"
            ),
        ),
    ),
    references={
        "practices.md": (
            Heading("Copywriting Practices"),
            *section(
                "Sentence Structure",
                2,
                *_COPY_SENTENCES,
                Value(
                    "structure.sentenceStructure.variety",
                    label="Variety",
                ),
            ),
            *section("Copy Cadence", 2, Value("structure.copyCadence")),
            *section(
                "Formatting Patterns",
                2,
                Bullets("structure.formattingPatterns"),
            ),
            *section(
                "Narrative Flow", 2, Value("structure.narrativeFlow")
            ),
        ),
        "structure.md": (
            Heading("Copy Structure & Flow"),
            *section(
                "Language Style", 2, Value("language.languageStyle")
            ),
            *section(
                "Signature Phrases",
                2,
                Bullets("language.signaturePhrases", quote=True),
            ),
            *section("Power Words", 2, Bullets("language.powerWords")),
            *section(
                "Paragraph Flow", 2, Value("structure.paragraphFlow")
            ),
        ),
        "examples.md": (
            Heading("Example Analysis"),
            *section(
                "Original Content Sample",
                2,
                Text(
                    "This skill was extracted from content with the"
                    " following characteristics:"
                ),
                Value("style.toneVoice", label="Tone"),
                Value("structure.narrativeFlow", label="Flow"),
                Value("core.hook", label="Key Hook"),
            ),
            *section(
                "Application Example",
                2,
                Text(
                    "When applying this skill, mirror these patterns:\n"
                    "- Use similar psychological triggers\n"
                    "- Match the sentence cadence\n"
                    "- Follow the narrative structure\n"
                    "- Employ the signature phrases naturally"
                ),
            ),
        ),
    },
)

# ── Process ──────────────────────────────────────────────

PROCESS_TEMPLATES = TemplateSet(
    main=(
        Heading("{skill_name} Process Skill"),
        *_description(),
        Heading("Workflow Overview", 2),
        *section("Process Steps", 3, Steps("workflow.steps")),
        *section(
            "Decision Points", 3, Bullets("workflow.decisionPoints")
        ),
        *section("Dependencies", 3, Bullets("workflow.dependencies")),
        *section("Critical Path", 3, Value("workflow.criticalPath")),
        Heading("Resources Required", 2),
        *section(
            "Tools Required", 3, Bullets("resources.toolsRequired")
        ),
        *section("Skills Needed", 3, Bullets("resources.skillsNeeded")),
        *section(
            "People Involved", 3, Bullets("resources.peopleInvolved")
        ),
        *section(
            "Documents Needed", 3, Bullets("resources.documentsNeeded")
        ),
        Heading("Quality & Risk Management", 2),
        *section(
            "Success Metrics", 3, Bullets("quality.successMetrics")
        ),
        *section(
            "Quality Checks", 3, Bullets("quality.qualityChecks")
        ),
        *section(
            "Common Pitfalls", 3, Bullets("quality.commonPitfalls")
        ),
        *section(
            "Troubleshooting", 3, Bullets("quality.troubleshooting")
        ),
        Heading("Context", 2),
        *section("When to Use", 3, Value("context.when")),
        *section("Frequency", 3, Value("context.frequency")),
        *section("Variations", 3, Bullets("context.variations")),
        *section("Dependencies", 3, Bullets("context.dependencies")),
    ),
    references={
        "practices.md": (
            Heading("Process Practices"),
            *section(
                "Workflow Management",
                2,
                Text(
                    "Follow the defined steps in sequence, paying"
                    " attention to dependencies and critical path items."
                ),
            ),
            *section(
                "Quality Assurance",
                2,
                Text(
                    "Implement the quality checks at each stage to"
                    " ensure process integrity."
                ),
            ),
            *section(
                "Risk Mitigation",
                2,
                Text(
                    "Be aware of common pitfalls and have"
                    " troubleshooting procedures ready."
                ),
            ),
        ),
        "structure.md": (
            Heading("Process Structure"),
            *section(
                "Step Dependencies", 2, Bullets("workflow.dependencies")
            ),
            *section("Critical Path", 2, Value("workflow.criticalPath")),
        ),
        "examples.md": (
            Heading("Process Examples"),
            *section(
                "Typical Execution",
                2,
                Text(
                    "This process skill was extracted from content"
                    " describing a proven workflow."
                ),
            ),
            *section("Variations", 2, Bullets("context.variations")),
        ),
    },
)

# ── Technical ────────────────────────────────────────────

TECHNICAL_TEMPLATES = TemplateSet(
    main=(
        Heading("{skill_name} Technical Skill"),
        *_description(),
        Heading("Core Concepts", 2),
        *section(
            "Main Concepts", 3, Bullets("concepts.mainConcepts")
        ),
        *section("Key Terminology", 3, Terms("concepts.terminology")),
        *section(
            "Prerequisites", 3, Bullets("concepts.prerequisites")
        ),
        *section("Difficulty Level", 3, Value("concepts.difficulty")),
        Heading("Implementation", 2),
        *section(
            "Design Patterns", 3, Bullets("implementation.patterns")
        ),
        *section(
            "Best Practices", 3, Bullets("implementation.bestPractices")
        ),
        *section(
            "Anti-Patterns", 3, Bullets("implementation.antiPatterns")
        ),
        *section(
            "Examples",
            3,
            Examples(
                "implementation.examples",
                level=4,
                explanation_label="Explanation",
            ),
        ),
        Heading("Architecture", 2),
        *section(
            "Components", 3, Bullets("architecture.components")
        ),
        *section("Data Flow", 3, Value("architecture.dataFlow")),
        *section(
            "Integrations", 3, Bullets("architecture.integrations")
        ),
        *section(
            "Scalability Considerations",
            3,
            Value("architecture.scalability"),
        ),
    ),
    references={
        "practices.md": (
            Heading("Technical Practices"),
            *section(
                "Implementation Guidelines",
                2,
                Text(
                    "Follow the best practices and avoid the"
                    " anti-patterns identified in the analysis."
                ),
            ),
            *section(
                "Code Examples", 2, Examples("implementation.examples")
            ),
        ),
        "structure.md": (
            Heading("Technical Structure"),
            *section(
                "Architecture Components",
                2,
                Bullets("architecture.components"),
            ),
            *section("Data Flow", 2, Value("architecture.dataFlow")),
        ),
        "examples.md": (
            Heading("Technical Examples"),
            *section(
                "Implementation Examples",
                2,
                Examples(
                    "implementation.examples",
                    explanation_label="Why it works",
                ),
            ),
        ),
    },
)

TEMPLATE_SETS: dict[ContentType, TemplateSet] = {
    ContentType.COPYWRITING: COPYWRITING_TEMPLATES,
    ContentType.PROCESS: PROCESS_TEMPLATES,
    ContentType.TECHNICAL: TECHNICAL_TEMPLATES,
}
