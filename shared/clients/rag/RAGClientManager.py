from shared.clients.ClientManager import ClientManager
from shared.clients.rag.RAGClientInterface import RAGClientInterface


class RAGClientManager(ClientManager):
    family = "RAG"
    class_prefix = "RAGClient"
    default_engine = "qdrant"

    def get_client(self) -> RAGClientInterface:
        return self.client
