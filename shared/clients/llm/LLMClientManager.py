from shared.clients.ClientManager import ClientManager
from shared.clients.llm.LLMClientInterface import LLMClientInterface


class LLMClientManager(ClientManager):
    family = "LLM"
    class_prefix = "LLMClient"
    default_engine = "openai"

    def get_client(self) -> LLMClientInterface:
        return self.client
