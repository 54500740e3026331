"""Grounding prompt assembly.

Both functions are pure: the same documents, history and question always
produce the same prompt.
"""

from services.prompting.policies import DEFAULT_WEB_POLICY, POLICIES, PromptPolicy
from shared.models.search import ConversationTurn, RetrievedDocument

# video transcripts are stored as "youtube" but are web content all the same
WEB_SOURCE_TYPES = frozenset({"url", "youtube"})
DEFAULT_HISTORY_TURNS = 6
DOCUMENT_SEPARATOR = "\n\n---\n\n"

PROMPT_PREAMBLE = "You are NuroDesk AI, an intelligent document analysis assistant."
PROMPT_ANSWER_CUE = "YOUR ANSWER (follow the specific instructions above):"


def select_policy(query: str, documents: list[RetrievedDocument]) -> PromptPolicy | None:
    """Return the response policy for a question, or None when no web document was retrieved."""
    if not any(doc.type in WEB_SOURCE_TYPES for doc in documents):
        return None
    lower_query = query.lower()
    for policy in POLICIES:
        if policy.matches(lower_query):
            return policy
    return DEFAULT_WEB_POLICY


def format_documents(documents: list[RetrievedDocument]) -> str:
    return DOCUMENT_SEPARATOR.join(
        f"[{doc.type.upper()}: {doc.source or f'Document {index}'}]\n{doc.text}"
        for index, doc in enumerate(documents, start=1)
    )


def format_history(history: list[ConversationTurn], max_turns: int = DEFAULT_HISTORY_TURNS) -> str:
    """Render the most recent turns as "User:"/"Assistant:" lines; older turns are dropped."""
    recent = history[-max_turns:] if max_turns > 0 else []
    return "\n".join(
        f"{'User' if turn.role == 'user' else 'Assistant'}: {turn.text}"
        for turn in recent
    )


def compose(
    documents: list[RetrievedDocument],
    history: list[ConversationTurn],
    query: str,
    max_history_turns: int = DEFAULT_HISTORY_TURNS,
) -> str:
    """Build the grounding prompt: preamble, policy, history, documents, question."""
    blocks = [PROMPT_PREAMBLE]

    policy = select_policy(query, documents)
    if policy is not None:
        blocks.append(policy.instructions)

    conversation = format_history(history, max_history_turns)
    if conversation:
        blocks.append(f"CONVERSATION HISTORY:\n{conversation}")

    blocks.append(f"DOCUMENTS:\n{format_documents(documents)}")
    blocks.append(f"USER QUESTION:\n{query}")
    blocks.append(PROMPT_ANSWER_CUE)
    return "\n\n".join(blocks)
