from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig


class ClientManager:
    """Instantiates the engine selected by "<FAMILY>_ENGINE" for one client family.

    Engines live in shared/clients/<family>/<engine>/<Prefix><Engine>.py, e.g.
    shared/clients/rag/qdrant/RAGClientQdrant.py for RAG_ENGINE=qdrant.
    """

    family: str = ""
    class_prefix: str = ""
    default_engine: str = ""

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.client = self._initialize_client()

    def _get_engine_from_env(self) -> str:
        engine = self.helper_config.get_string_val(f"{self.family}_ENGINE", default=self.default_engine)
        return engine.strip().lower()

    def _initialize_client(self) -> ClientInterface:
        """
        Raises:
            ValueError: If no module or class exists for the configured engine.
        """
        engine = self._get_engine_from_env()
        class_name = f"{self.class_prefix}{engine.capitalize()}"
        module_path = f"shared.clients.{self.family.lower()}.{engine}.{class_name}"
        try:
            module = __import__(module_path, fromlist=[class_name])
            client_class = getattr(module, class_name)
        except (ImportError, AttributeError) as e:
            raise ValueError(f"Unsupported {self.family} engine '{engine}': {e}") from e
        client = client_class(helper_config=self.helper_config)
        self.logging.debug("Instantiated %s client %s.", self.family, class_name)
        return client

    def get_client(self) -> ClientInterface:
        return self.client
