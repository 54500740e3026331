from shared.clients.ClientManager import ClientManager
from shared.clients.stt.STTClientInterface import STTClientInterface


class STTClientManager(ClientManager):
    family = "STT"
    class_prefix = "STTClient"
    default_engine = "openai"

    def get_client(self) -> STTClientInterface:
        return self.client
