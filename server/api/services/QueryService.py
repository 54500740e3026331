"""Query service. Orchestrates retrieval, prompt composition and answer generation.

Flow: embed question -> tenant-filtered search -> compose prompt -> LLM -> answer
plus the top retrieved sources. Sources are taken from retrieval, independent
of what the model actually cites.
"""

from services.prompting.prompt_composer import compose
from services.retrieval.RetrievalService import RetrievalService
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.search import Answer, ConversationTurn, RetrievedDocument, SourceReference

NO_RESULTS_ANSWER = (
    "I couldn't find any relevant information in your uploaded documents. "
    "Please ensure you've uploaded documents related to your question."
)


class QueryService:
    """Answers a user's question from that user's own documents."""

    def __init__(
        self,
        helper_config: HelperConfig,
        retrieval_service: RetrievalService,
        llm_client: LLMClientInterface,
    ) -> None:
        self.logging = helper_config.get_logger()
        self.max_history_turns = helper_config.get_int_val("PROMPT_HISTORY_TURNS", default=6)
        self.max_sources = helper_config.get_int_val("ANSWER_MAX_SOURCES", default=5)
        self._retrieval = retrieval_service
        self._llm_client = llm_client

    ##########################################
    ################ CORE ####################
    ##########################################

    async def do_query(self, query: str, user_id: str, history: list[ConversationTurn] | None = None) -> Answer:
        """Answer a natural language question.

        Args:
            query (str): The user's question.
            user_id (str): The requesting user's id; only their documents are searched.
            history (list[ConversationTurn] | None): Earlier turns, oldest first.

        Returns:
            Answer: The generated answer and up to ANSWER_MAX_SOURCES sources. When
                nothing was retrieved, a fixed "no relevant information" answer and no sources.

        Raises:
            RetrievalError: If the query could not be embedded or searched.
            GenerationError: If the language model call failed.
        """
        self.logging.info("Executing query for user %s: %r", user_id, query[:80])

        documents = await self._retrieval.retrieve(query, user_id=user_id)
        if not documents:
            self.logging.info("No documents found for user %s, returning fallback answer.", user_id)
            return Answer(answer=NO_RESULTS_ANSWER, sources=[])

        prompt = compose(documents, history or [], query, max_history_turns=self.max_history_turns)
        answer = await self._llm_client.do_generate(prompt)
        self.logging.info("Answer generated for user %s (%d chars, %d documents).", user_id, len(answer), len(documents))

        return Answer(answer=answer, sources=self._build_sources(documents))

    ##########################################
    ############### HELPERS ##################
    ##########################################

    def _build_sources(self, documents: list[RetrievedDocument]) -> list[SourceReference]:
        """Project the top documents (already sorted by score) to source references."""
        return [
            SourceReference(
                name=doc.filename or doc.source or doc.url or f"Document {index}",
                type=doc.type,
                page=doc.page,
                videoId=doc.video_id,
            )
            for index, doc in enumerate(documents[: self.max_sources], start=1)
        ]
