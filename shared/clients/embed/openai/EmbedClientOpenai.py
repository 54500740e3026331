from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig

OPENAI_BASE_URL = "https://api.openai.com/v1"


class EmbedClientOpenai(EmbedClientInterface):
    """OpenAI-compatible /embeddings endpoint."""

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
        return f"/models/{self.embed_model}"

    def get_endpoint_embedding(self) -> str:
        return "/embeddings"

    def get_embed_payload(self, texts: list[str]) -> dict:
        return {"model": self.embed_model, "input": texts}

    def extract_embeddings(self, raw_response: dict) -> list[list[float]]:
        # items carry their input position in "index"
        items = sorted(raw_response.get("data") or [], key=lambda item: item.get("index", 0))
        if not items or not all(item.get("embedding") for item in items):
            raise ValueError(f"Embedding response holds no embeddings. Keys: {list(raw_response.keys())}")
        return [item["embedding"] for item in items]
