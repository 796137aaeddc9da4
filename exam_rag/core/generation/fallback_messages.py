"""
Fallback Messages
=================

Deterministic answers used when a grounded answer cannot be produced.
"""

from typing import Iterable, List

_BULLET = "•"


def _bullets(lines: Iterable[str]) -> str:
    return "\n".join(f"{_BULLET} {line}" for line in lines)


def no_response_message(question: str, subjects: List[str]) -> str:
    """The LLM returned an empty answer."""
    parts = [f'I\'m having trouble generating a response to your question about "{question}".']

    if subjects:
        parts.append(f"**Available subjects in the knowledge base:**\n{_bullets(subjects)}")

    parts.append("**What you can try:**\n" + _bullets([
        "Rephrase your question to be more specific",
        "Break complex questions into smaller parts",
        "Ask about topics covered in the uploaded materials",
        "Try again in a moment",
    ]))
    parts.append("Please try asking your question again!")
    return "\n\n".join(parts)


def insufficient_context_message(question: str, subjects: List[str]) -> str:
    """The LLM reported that the provided context does not cover the question."""
    parts = [
        "I don't have sufficient information in the uploaded documents to answer "
        f'your question about "{question}".'
    ]

    if subjects:
        parts.append(f"**Available subjects in the knowledge base:**\n{_bullets(subjects)}")
        parts.append("**Suggestions:**\n" + _bullets([
            f"Try asking about topics related to: {', '.join(subjects)}",
            "Ask your teacher if materials for this topic have been uploaded",
            "Rephrase your question to be more specific",
        ]))
    else:
        parts.append("**Suggestions:**\n" + _bullets([
            "Ask your teacher to upload relevant study materials",
            "Try asking about a different topic",
            "Check if your question relates to available course content",
        ]))

    parts.append("**Study Tips:**\n" + _bullets([
        "Review your textbooks for this topic",
        "Take notes on key concepts to ask about later",
    ]))
    return "\n\n".join(parts)


def generation_error_message(question: str, subjects: List[str], error: str) -> str:
    """The LLM call raised."""
    parts = [f'I encountered an error while processing your question about "{question}".']

    if subjects:
        parts.append(f"**Available subjects:** {', '.join(subjects)}")

    parts.append("**What you can do:**\n" + _bullets([
        "Try asking your question again in a moment",
        "Rephrase your question to be more specific",
        "Ask about topics from the available subjects",
    ]))
    parts.append(f"**Error details:** {error or 'Unknown error'}")
    parts.append("Please try again!")
    return "\n\n".join(parts)


def no_relevant_documents_message(question: str, subjects: List[str]) -> str:
    """Retrieval found candidates but none passed the relevance threshold."""
    parts = [
        "I couldn't find documents that are sufficiently relevant to answer "
        f'your question about "{question}".'
    ]

    if subjects:
        parts.append(f"**Available subjects in the knowledge base:**\n{_bullets(subjects)}")

    parts.append("**Suggestions:**\n" + _bullets([
        "Try rephrasing your question to be more specific",
        "Check if your question relates to one of the available subjects",
        "Ask your teacher if materials for this topic have been uploaded",
        "Consider breaking down complex questions into smaller parts",
    ]))
    parts.append("Please try asking your question in a different way or about a topic from the available subjects!")
    return "\n\n".join(parts)


def pipeline_error_message(question: str, error: str) -> str:
    """Anything unexpected went wrong while answering."""
    parts = [
        f'I encountered an error while processing your question about "{question}".',
        "**What happened:**\nThe assistant ran into a technical issue while searching through the documents.",
        "**What you can do:**\n" + _bullets([
            "Try asking your question again in a moment",
            "Rephrase your question to be more specific",
            "Break complex questions into smaller parts",
        ]),
        f"**Error details:** {error or 'Unknown error'}",
        "Please try again in a moment!",
    ]
    return "\n\n".join(parts)


def image_error_message(error: str) -> str:
    """The image attached to a question could not be analysed."""
    return (
        f"I'm having trouble processing the image you provided: {error or 'Unknown error'}. "
        "Please try with a different image or ask your question without the image."
    )
