import pytest

from conftest import ScriptedLLM
from server.api.services.QueryService import NO_RESULTS_ANSWER, QueryService
from shared.models.errors import GenerationError, RetrievalError
from shared.models.search import ConversationTurn, RetrievedDocument


class FakeRetrieval:
    def __init__(self, documents=None, error=None):
        self.documents = documents or []
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def retrieve(self, query, user_id, k=None):
        self.calls.append((query, user_id))
        if self.error is not None:
            raise self.error
        return self.documents


def documents(count: int) -> list[RetrievedDocument]:
    docs = [
        RetrievedDocument(id="p1", text="Page three text", score=0.99, type="pdf", source="report.pdf", filename="report.pdf", loc={"pageNumber": 3}),
        RetrievedDocument(id="y1", text="Video text", score=0.95, type="youtube", source="https://youtu.be/abc", url="https://youtu.be/abc", video_id="abc"),
    ]
    docs += [
        RetrievedDocument(id=f"t{i}", text=f"note {i}", score=0.9 - i / 100, type="txt", source=f"note{i}.txt")
        for i in range(count - len(docs))
    ]
    return docs[:count]


async def test_no_documents_returns_fallback_without_calling_llm(helper_config):
    llm = ScriptedLLM()
    service = QueryService(helper_config, retrieval_service=FakeRetrieval([]), llm_client=llm)
    answer = await service.do_query("anything?", user_id="alice")
    assert answer.answer == NO_RESULTS_ANSWER
    assert answer.sources == []
    assert llm.prompts == []


async def test_answer_with_top_sources(helper_config):
    llm = ScriptedLLM(answer="Revenue grew.")
    retrieval = FakeRetrieval(documents(8))
    service = QueryService(helper_config, retrieval_service=retrieval, llm_client=llm)

    answer = await service.do_query("How did revenue develop?", user_id="alice")
    assert answer.answer == "Revenue grew."
    assert retrieval.calls == [("How did revenue develop?", "alice")]
    assert len(answer.sources) == 5
    assert answer.sources[0].name == "report.pdf"
    assert answer.sources[0].page == 3
    assert answer.sources[1].videoId == "abc"
    assert answer.sources[1].type == "youtube"


async def test_prompt_contains_question_documents_and_history(helper_config):
    llm = ScriptedLLM()
    service = QueryService(helper_config, retrieval_service=FakeRetrieval(documents(2)), llm_client=llm)
    history = [ConversationTurn(role="user", text="earlier question")]
    await service.do_query("What is on page three?", user_id="alice", history=history)

    prompt = llm.prompts[0]
    assert "USER QUESTION:\nWhat is on page three?" in prompt
    assert "[PDF: report.pdf]\nPage three text" in prompt
    assert "User: earlier question" in prompt


async def test_source_count_is_configurable(helper_config, monkeypatch):
    monkeypatch.setenv("ANSWER_MAX_SOURCES", "2")
    service = QueryService(helper_config, retrieval_service=FakeRetrieval(documents(6)), llm_client=ScriptedLLM())
    answer = await service.do_query("q", user_id="alice")
    assert len(answer.sources) == 2


async def test_generation_error_propagates(helper_config):
    llm = ScriptedLLM(error=GenerationError("LLM request failed: quota exceeded"))
    service = QueryService(helper_config, retrieval_service=FakeRetrieval(documents(1)), llm_client=llm)
    with pytest.raises(GenerationError, match="quota"):
        await service.do_query("q", user_id="alice")


async def test_retrieval_error_propagates(helper_config):
    service = QueryService(helper_config, retrieval_service=FakeRetrieval(error=RetrievalError("Index search failed")), llm_client=ScriptedLLM())
    with pytest.raises(RetrievalError):
        await service.do_query("q", user_id="alice")
