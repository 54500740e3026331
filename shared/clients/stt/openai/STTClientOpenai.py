from shared.clients.stt.STTClientInterface import STTClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class STTClientOpenai(STTClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default="https://api.openai.com/v1", val_type="string")
        self._api_key = self.get_config_val("API_KEY", default=None, val_type="string")

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Openai"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default="https://api.openai.com/v1"),
            EnvConfig(env_key="API_KEY", val_type="string", default=None),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        return {"Authorization": f"Bearer {self._api_key}"}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return f"/models/{self.stt_model}"

    def _get_endpoint_transcription(self) -> str:
        return "/audio/transcriptions"

    ################ PAYLOAD BUILDER ##################
    def get_transcription_form(self) -> dict:
        # response_format=text returns the bare transcript instead of JSON
        return {"model": self.stt_model, "language": self.stt_language, "response_format": "text"}

    def extract_transcript(self, response_text: str) -> str:
        return (response_text or "").strip()
