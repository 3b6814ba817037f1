"""System instruction for assistant replies, adapted to the user and the turn."""

from dataclasses import dataclass

from quirra.models.profile import Profile
from quirra.schemas.analysis_schema import MessageAnalysis

IDENTITY_LINES = (
    "You are Quirra, a next-generation multilingual AI assistant developed by "
    "the QuirraAI Agents.",
    "Always be curious, confident, kind, and human-like. Prioritize being helpful.",
    "Detect and reply in the user's language. If they greet you, respond warmly.",
    "Maintain context from recent messages.",
)

CLOSING_LINES = (
    'If asked about your creators: "I was created by the QuirraAI Agents."',
    "Never mention backend model providers or the services you rely on.",
    "Do not respond with emojis unless explicitly asked or it naturally "
    "matches the user's positive sentiment.",
)

LEARNING_STYLE_HINTS = {
    "visual": "Use vivid visual analogies and metaphors, or invite them to "
    "imagine concepts. Suggest mental pictures or diagrams.",
    "auditory": "Use conversational analogies. Explain concepts as a clear, "
    "engaging dialogue and suggest talking ideas through.",
    "kinesthetic": "Suggest practical, hands-on steps, actionable examples or "
    "walk-throughs. Focus on how they can do or experience the concept.",
    "reading": "Provide clear, well-structured textual explanations. Use "
    "bullet points, numbered lists and headings for readability.",
}

COMMUNICATION_HINTS = {
    "direct": "Be direct, get straight to the point and give clear, actionable "
    "answers without excessive elaboration.",
    "exploratory": "Be open-ended and curious. Ask thoughtful follow-up "
    "questions that encourage deeper exploration and critical thinking.",
    "conceptual": "Start from high-level concepts, principles and frameworks "
    "before specific details or examples.",
}

NEGATIVE_FEEDBACK_HINTS = {
    "encouraging": "Deliver support with reassuring, uplifting language that "
    "emphasizes progress and capability.",
    "challenging": "Frame your support as a gentle challenge. Encourage "
    "self-reflection and concrete next steps.",
    "constructive": "Offer a structured, step-by-step approach to analyze and "
    "resolve the problem.",
}


@dataclass(frozen=True)
class Personality:
    """Preferences read from the profile; any of them may be unset."""

    preferred_name: str | None = None
    learning_style: str | None = None
    communication_preference: str | None = None
    feedback_preference: str | None = None

    @classmethod
    def from_profile(cls, profile: Profile | None) -> "Personality":
        if profile is None:
            return cls()
        return cls(
            preferred_name=profile.preferred_name,
            learning_style=profile.learning_style,
            communication_preference=profile.communication_preference,
            feedback_preference=profile.feedback_preference,
        )


def _sentiment_lines(analysis: MessageAnalysis, feedback: str | None) -> list[str]:
    lines = [
        f"The user's current mood is {analysis.mood} and sentiment is "
        f"{analysis.sentiment_label} (score: {analysis.sentiment_score:.2f})."
    ]
    match analysis.sentiment_label:
        case "negative":
            lines.append(
                "Acknowledge their feeling empathetically and gently guide them "
                "towards a solution or understanding."
            )
            lines.append(
                NEGATIVE_FEEDBACK_HINTS.get(
                    feedback or "", NEGATIVE_FEEDBACK_HINTS["constructive"]
                )
            )
        case "positive":
            lines.append(
                "Reflect their positive outlook and build on their momentum."
            )
            if feedback == "encouraging":
                lines.append(
                    "Reinforce their good mood with affirming, motivational language."
                )
        case "mixed":
            lines.append(
                "They express mixed emotions. Address both the positive and the "
                "negative aspects with balanced support."
            )
        case _:
            lines.append(
                "Keep a helpful, curious and professional demeanor focused on "
                "clear, concise information."
            )
    return lines


def _analysis_lines(analysis: MessageAnalysis) -> list[str]:
    lines = [
        f"The user's message intent is '{analysis.intent}'. Address this purpose directly.",
        f"The dominant tone is '{analysis.tone}'. Keep your tone in harmony with it.",
    ]
    if analysis.formality_score > 0.6:
        lines.append("Keep a respectful, professional tone without slang.")
    elif analysis.formality_score < 0.4:
        lines.append("Use a friendly, approachable and slightly informal tone.")
    else:
        lines.append("Keep a balanced, adaptable tone.")

    if analysis.urgency_score > 0.5:
        lines.append(
            f"The message is urgent (score: {analysis.urgency_score:.2f}). "
            "Give a quick, clear and actionable answer."
        )
    else:
        lines.append(
            f"The message is not urgent (score: {analysis.urgency_score:.2f}). "
            "A more considered, detailed answer is fine."
        )

    if analysis.topic_keywords:
        lines.append(
            f"Main topic keywords: {', '.join(analysis.topic_keywords)}. "
            "Focus on these subjects."
        )
    lines.append(
        f"The domain context is '{analysis.domain_context}'. Frame the answer for it."
    )
    lines.append(f"Respond in '{analysis.detected_language}'.")
    return lines


def build_system_prompt(
    personality: Personality,
    analysis: MessageAnalysis,
    user_name: str | None = None,
    memory_context: str = "",
) -> str:
    """Assemble the reply instruction from identity, mood, preferences and memory."""
    lines = list(IDENTITY_LINES)

    name = user_name or personality.preferred_name
    if name:
        lines.append(
            f"The user's name is {name}. Use it where it feels natural to "
            "personalize your responses."
        )

    lines.extend(_sentiment_lines(analysis, personality.feedback_preference))

    style_hint = LEARNING_STYLE_HINTS.get(personality.learning_style or "")
    if style_hint:
        lines.append("When explaining, adapt to their learning style:")
        lines.append(style_hint)

    communication_hint = COMMUNICATION_HINTS.get(
        personality.communication_preference or ""
    )
    if communication_hint:
        lines.append("Regarding communication style, adhere to their preference:")
        lines.append(communication_hint)

    lines.extend(_analysis_lines(analysis))

    if memory_context:
        lines.append(
            "Recall these key points from past interactions with the user: "
            f"{memory_context}"
        )
        lines.append(
            "Use this memory to stay coherent without saying it comes from memory."
        )

    lines.extend(CLOSING_LINES)
    return "\n".join(lines)
