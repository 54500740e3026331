from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig

OPENAI_BASE_URL = "https://api.openai.com/v1"


class LLMClientOpenai(LLMClientInterface):
    """OpenAI-compatible /chat/completions endpoint."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=OPENAI_BASE_URL)
        self._api_key = self.get_config_val("API_KEY")

    def _get_engine_name(self) -> str:
        return "Openai"

    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=OPENAI_BASE_URL),
            EnvConfig(env_key="API_KEY", val_type="string"),
        ]

    def _get_auth_header(self) -> dict:
        return {"Authorization": f"Bearer {self._api_key}"}

    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return f"/models/{self.chat_model}"

    def _get_endpoint_generate(self) -> str:
        return "/chat/completions"

    def get_generate_payload(self, prompt: str) -> dict:
        return {
            "model": self.chat_model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.temperature,
        }

    def extract_answer(self, raw_response: dict) -> str:
        choices = raw_response.get("choices") or [{}]
        content = (choices[0].get("message") or {}).get("content")
        if content is None:
            raise ValueError(f"Chat response does not contain a valid message. Keys: {list(raw_response.keys())}")
        return content
