from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.errors import BackendError, GenerationError


class LLMClientInterface(ClientInterface):
    """Single-turn language model. Every call is independent; all context travels in the prompt."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self.chat_model = helper_config.get_string_val("LLM_CHAT_MODEL", default="gpt-4o")
        self.temperature = helper_config.get_number_val("LLM_TEMPERATURE", default=0.1)

    def _get_client_type(self) -> str:
        return "llm"

    def _get_default_timeout(self) -> float:
        return 120.0

    @abstractmethod
    def _get_endpoint_generate(self) -> str:
        pass

    @abstractmethod
    def get_generate_payload(self, prompt: str) -> dict:
        """Request body that sends the prompt as the only user turn."""
        pass

    @abstractmethod
    def extract_answer(self, raw_response: dict) -> str:
        """
        Raises:
            ValueError: If the response holds no reply text.
        """
        pass

    async def do_generate(self, prompt: str) -> str:
        """Answer a fully composed prompt.

        Raises:
            GenerationError: On transport or quota failure, or a malformed reply.
        """
        try:
            response = await self.do_request(
                method="POST",
                endpoint=self._get_endpoint_generate(),
                json=self.get_generate_payload(prompt),
                raise_on_error=True,
            )
            answer = self.extract_answer(response.json())
        except (BackendError, ValueError) as exc:
            self.logging.error("Generation with model '%s' failed: %s", self.chat_model, exc)
            raise GenerationError(f"Answer generation failed: {exc}") from exc
        self.logging.debug("Model '%s' answered with %d chars.", self.chat_model, len(answer))
        return answer
