from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig


class EmbedClientInterface(ClientInterface):
    """Maps text to dense vectors of one fixed dimension.

    Ingestion and queries share the same client, so do_embed() rejects any
    vector whose size differs from EMBED_VECTOR_SIZE.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self.embed_model = helper_config.get_string_val("EMBED_MODEL", default="text-embedding-3-large")
        self.embed_vector_size = helper_config.get_int_val("EMBED_VECTOR_SIZE", default=3072)
        self.embed_distance = helper_config.get_string_val("EMBED_DISTANCE", default="Cosine")

    ##########################################
    ################ GETTER ##################
    ##########################################

    def _get_client_type(self) -> str:
        return "embed"

    def get_vector_size(self) -> int:
        return self.embed_vector_size

    def get_distance(self) -> str:
        """Distance metric the index collection is created with."""
        return self.embed_distance

    @abstractmethod
    def get_endpoint_embedding(self) -> str:
        pass

    ##########################################
    ########### PAYLOAD BUILDER ##############
    ##########################################

    @abstractmethod
    def get_embed_payload(self, texts: list[str]) -> dict:
        pass

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    @abstractmethod
    def extract_embeddings(self, raw_response: dict) -> list[list[float]]:
        """
        Returns:
            list[list[float]]: One vector per input text, in input order.

        Raises:
            ValueError: If the response carries no embeddings.
        """
        pass

    def _check_vectors(self, vectors: list[list[float]], expected: int) -> None:
        if len(vectors) != expected:
            raise ValueError(f"Expected {expected} embeddings, got {len(vectors)}.")
        wrong = next((v for v in vectors if len(v) != self.embed_vector_size), None)
        if wrong is not None:
            raise ValueError(
                f"Embedding dimension mismatch: model '{self.embed_model}' returned {len(wrong)}, "
                f"index expects {self.embed_vector_size}."
            )

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_embed(self, texts: list[str] | str) -> list[list[float]]:
        """Embed one or more texts in a single request.

        Raises:
            BackendError: If the backend cannot be reached or answers with an error status.
            ValueError: If the number or dimension of the returned vectors is wrong.
        """
        batch = [texts] if isinstance(texts, str) else list(texts)
        response = await self.do_request(
            method="POST",
            endpoint=self.get_endpoint_embedding(),
            json=self.get_embed_payload(batch),
            raise_on_error=True,
        )
        vectors = self.extract_embeddings(response.json())
        self._check_vectors(vectors, expected=len(batch))
        self.logging.debug("Embedded %d text(s) with %s.", len(batch), self.embed_model)
        return vectors

    async def embed_text(self, text: str) -> list[float]:
        return (await self.do_embed(text))[0]
