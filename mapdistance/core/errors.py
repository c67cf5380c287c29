"""User-facing error taxonomy.

Every failure that reaches a shell is one of these classes. Shells only read
`kind` and `message`; upstream exception details stay in the logs and on
`__cause__`.
"""

VALIDATION_MESSAGE = "Por favor, informe a origem e o destino."
NOT_FOUND_MESSAGE = "O modelo de IA não foi encontrado. Por favor, tente novamente mais tarde."
REQUEST_MESSAGE = (
    "Erro ao calcular a distância. Verifique sua conexão ou tente outros nomes de cidades."
)
UNEXPECTED_MESSAGE = "Ocorreu um erro inesperado ao processar sua solicitação."
LOCATION_UNAVAILABLE_MESSAGE = "Localização não disponível"


class DistanceError(Exception):
    """Base class for classified failures with a fixed display message."""

    kind = "error"
    default_message = UNEXPECTED_MESSAGE

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(DistanceError):
    """Empty origin or destination; raised before any request is made."""

    kind = "validation"
    default_message = VALIDATION_MESSAGE


class NotFoundError(DistanceError):
    """Model or upstream resource reported as not found."""

    kind = "not_found"
    default_message = NOT_FOUND_MESSAGE


class RequestError(DistanceError):
    """Any other failure of the external call or its response handling."""

    kind = "request"
    default_message = REQUEST_MESSAGE


class LocationUnavailableError(DistanceError):
    """Device coordinate could not be determined. Never fatal."""

    kind = "location"
    default_message = LOCATION_UNAVAILABLE_MESSAGE
